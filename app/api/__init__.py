"""HTTP routers for the Wildwatch API."""

from .alerts import router as alerts_router
from .analytics import router as analytics_router
from .devices import router as devices_router

__all__ = ["alerts_router", "analytics_router", "devices_router"]
