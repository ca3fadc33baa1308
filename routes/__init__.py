from .appointments import router as appointments_router
from .owners import router as owners_router
from .vets import router as vets_router
from .visits import router as visits_router
from .stats import router as stats_router
from .auth import router as auth_router

__all__ = [
    "appointments_router",
    "owners_router",
    "vets_router",
    "visits_router",
    "stats_router",
    "auth_router",
]
