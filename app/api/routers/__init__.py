"""
app/api/routers package marker.
"""

from app.api.routers.scale_import import router as scale_import_router

__all__ = [
    "scale_import_router",
]
