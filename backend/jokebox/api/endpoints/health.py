from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from jokebox.api.shared.dependencies import get_joke_service
from jokebox.models.jokes import HealthStatus
from jokebox.services.joke_service import JokeService

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthStatus,
    responses={503: {"model": HealthStatus}},
)
async def healthcheck(
    service: JokeService = Depends(get_joke_service),
) -> JSONResponse:
    """Readiness probe reflecting store reachability."""
    cache = "available" if service.cache.is_valid() else "unavailable"
    if await service.check_store():
        body = HealthStatus(status="healthy", database="connected", cache=cache)
        return JSONResponse(content=body.model_dump())

    body = HealthStatus(status="unhealthy", database="disconnected", cache=cache)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump()
    )


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose Prometheus metrics for scraping."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
