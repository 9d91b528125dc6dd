"""
HTTP API.

    from orderdesk.api import create_app

    app = create_app(Settings.from_env())
"""

from orderdesk.api._app import create_app, ApiError, status_for, get_services
from orderdesk.api import _schemas as schemas

__all__ = ("create_app", "ApiError", "status_for", "get_services", "schemas")
