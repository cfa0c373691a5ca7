"""
Page handlers invoked by the Flask routes in hostinfo.web.server.

Handlers only talk to core services and return a render model; routing,
sessions and templates stay in the server module.
"""

from dataclasses import dataclass
from typing import Optional

from hostinfo.core.models import ProcessInformation, RuntimeInformation, SystemEnvironment


@dataclass
class SystemInformationView:
    """Render model for the System/Information page."""
    os_information: Optional[RuntimeInformation] = None
    process_information: Optional[ProcessInformation] = None
    system_environment: Optional[SystemEnvironment] = None


class SystemInformationPage:
    """Collects the three system snapshots for one page view."""

    def __init__(self, system_service):
        self.system_service = system_service

    def handle_view(self) -> SystemInformationView:
        # RetrievalError propagates to the framework's error handling
        view = SystemInformationView()
        view.system_environment = self.system_service.get_environment()
        view.process_information = self.system_service.get_process_information()
        view.os_information = self.system_service.get_os_information()
        return view
