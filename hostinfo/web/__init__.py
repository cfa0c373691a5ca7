"""
================================================================================
WEB MODULE - Web Interface
================================================================================

Flask web interface with authentication and the system information pages.

Components:
    server.py - Flask application, routes, authentication and security headers
    pages.py - Page handlers returning render models
    certificates.py - Self-signed certificate for HTTPS

Note:
    Server is imported directly by start_web_ui.py and web_server.py.
    No exports in __init__.py so importing page handlers does not build the app.

Usage:
    python start_web_ui.py
    python -m hostinfo.web.server

Last Modified: October 2026
================================================================================
"""

__all__ = []
