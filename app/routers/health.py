from datetime import datetime, timezone

from fastapi import APIRouter, status

from app.config import settings
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/health")
def health_check():
    try:
        return create_response(
            message=f"{settings.PROJECT_NAME} is running",
            data={
                "status": "OK",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)
