"""Application services."""

from .dashboard import (
    AuthenticationRequired,
    DashboardService,
    JobNotFound,
    build_dashboard_service,
    configure_dashboard_service,
    get_dashboard_service,
    reset_dashboard_state,
)
from .session import SessionStore

__all__ = [
    "AuthenticationRequired",
    "DashboardService",
    "JobNotFound",
    "SessionStore",
    "build_dashboard_service",
    "configure_dashboard_service",
    "get_dashboard_service",
    "reset_dashboard_state",
]
