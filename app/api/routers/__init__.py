"""
app/api/routers package marker.
"""

from app.api.routers.admin import router as admin_router
from app.api.routers.capture_samples import router as capture_samples_router
from app.api.routers.categories import router as categories_router
from app.api.routers.selectors import router as selectors_router

__all__ = [
    "admin_router",
    "capture_samples_router",
    "categories_router",
    "selectors_router",
]
