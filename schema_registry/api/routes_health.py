from datetime import datetime, timezone

from fastapi import APIRouter, Request

from schema_registry.models.schemas import HealthResponse

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    with request.app.state.db_lock:
        request.app.state.db.execute("SELECT 1").fetchone()
    now = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
    return HealthResponse(status="ok", time=now.replace("+00:00", "Z"))
