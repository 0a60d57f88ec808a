"""Health check endpoint."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from nino import __version__
from nino.api.deps import get_store
from nino.state import ProjectStore

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(store: ProjectStore = Depends(get_store)) -> Dict[str, Any]:
    """Service status plus the shape of the currently loaded project."""
    project = store.snapshot()
    return {
        "status": "healthy",
        "service": "NINO API",
        "version": __version__,
        "folders": len(project),
        "diagnostics": len(project.diagnostics),
    }
