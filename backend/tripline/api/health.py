from fastapi import APIRouter
from tripline.core.settings import settings
from tripline.utils.responses import success_response

router = APIRouter()


@router.get("/healthz")
def read_healthz() -> dict:
    """Basic liveness probe endpoint."""

    return success_response(
        {"status": "ok", "app": settings.app_name, "version": settings.app_version}
    )
