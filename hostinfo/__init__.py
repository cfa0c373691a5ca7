"""
================================================================================
HOSTINFO PACKAGE - Modular Source Code Organization
================================================================================

Top-level package containing all application modules organized by function.

Package Structure:
    hostinfo/core/      - Domain logic (system service, identity store, models)
    hostinfo/utils/     - Shared utilities (logging, config, constants, JSON)
    hostinfo/web/       - Flask web server, page handlers and templates

Design Principles:
    - Separation of concerns
    - Web framework bindings kept in hostinfo/web only
    - Test-friendly architecture
    - Clear public APIs

Last Modified: October 2026
================================================================================
"""

__version__ = "2026.1"
