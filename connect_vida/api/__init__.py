from .auth import router as auth_router
from .churches import router as churches_router
from .master_admin import router as master_admin_router
from .members import router as members_router
from .payments import router as payments_router
from .finance import router as finance_router
from .contributions import router as contributions_router
from .events import router as events_router
from .devotionals import router as devotionals_router
from .journey import router as journey_router
from .vocational import router as vocational_router
from .ministries import router as ministries_router
from .stats import router as stats_router

__all__ = [
    "auth_router",
    "churches_router",
    "master_admin_router",
    "members_router",
    "payments_router",
    "finance_router",
    "contributions_router",
    "events_router",
    "devotionals_router",
    "journey_router",
    "vocational_router",
    "ministries_router",
    "stats_router"
]
