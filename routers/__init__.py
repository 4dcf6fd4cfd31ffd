from .tenancies import router as tenancies_router
from .rent import router as rent_router
from .maintenance import router as maintenance_router
from .bookings import router as bookings_router
from .stats import router as stats_router
from .health import router as health_router

__all__ = [
     "tenancies_router",
     "rent_router",
     "maintenance_router",
     "bookings_router",
     "stats_router",
     "health_router",
]
