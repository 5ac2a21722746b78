from fastapi import APIRouter, Request

from schema_registry.db import repo
from schema_registry.models.schemas import MetricsResponse

router = APIRouter(prefix="/api/v1/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
def metrics(request: Request) -> MetricsResponse:
    snapshot = request.app.state.metrics.snapshot()
    with request.app.state.db_lock:
        counts = repo.schema_counts_by_application(request.app.state.db)
    snapshot["schemas"] = {"byApplication": counts}
    return MetricsResponse(**snapshot)
