"""Compatibility alias for `web_server` imports.

Routes and globals are defined in `hostinfo.web.server`. This module aliases the
package module so imports through either name interact with the same objects
(including monkeypatch of module-level globals like system_service).
"""

import importlib
import sys

_server = importlib.import_module("hostinfo.web.server")

# Expose all server attributes through this module name
sys.modules[__name__] = _server
