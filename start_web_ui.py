#!/usr/bin/env python3
"""
================================================================================
WEB UI LAUNCHER - Start Web Interface Server
================================================================================

Convenience launcher for the web-based UI server.

Features:
    - Starts the Flask server with HTTPS support
    - Automatic certificate generation for local SSL
    - Graceful shutdown handling

Usage:
    python start_web_ui.py

Access at: https://localhost:5000
The first account registered in the web UI becomes the administrator.

Last Modified: October 2026
================================================================================
"""

import sys


def main():
    """Start the web server"""
    print("Starting hostinfo Web UI...")
    print("=" * 60)

    try:
        from hostinfo.web.server import main as run_server
        run_server()
    except KeyboardInterrupt:
        print("\n\nShutting down web server...")
    except OSError as e:
        print(f"\nError starting web server: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
