"""
Joke endpoints.

Serves the joke list with freshness caching and stale fallback, plus the
device-aware paginated variant and the cache flush operation.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from jokebox.api.shared.cache_headers import (
    compute_etag,
    etag_matches,
    set_cache_header,
    set_source_headers,
)
from jokebox.api.shared.dependencies import get_joke_service
from jokebox.api.shared.device import (
    detect_device,
    page_size_for,
    paginate,
    project_for_mobile,
    total_pages,
)
from jokebox.core.config import get_settings
from jokebox.models.jokes import CacheCleared, ErrorBody, JokePage
from jokebox.services.joke_service import JokeResult, JokeService

router = APIRouter()

_UNAVAILABLE = {503: {"model": ErrorBody, "description": "No fresh or stale data."}}


def _respond(request: Request, result: JokeResult, content: Any) -> Response:
    """Wrap a payload with caching, validation and provenance headers."""
    settings = get_settings()
    payload = jsonable_encoder(content)
    etag = compute_etag(payload)

    if etag_matches(request, etag):
        response: Response = Response(status_code=status.HTTP_304_NOT_MODIFIED)
    else:
        response = JSONResponse(content=payload)

    response.headers["ETag"] = etag
    set_cache_header(
        response,
        settings.http_cache_max_age_seconds,
        stale_if_error_seconds=settings.http_stale_if_error_seconds,
    )
    set_source_headers(response, result)
    return response


@router.get(
    "/post",
    response_model=list[dict[str, Any]] | JokePage,
    responses=_UNAVAILABLE,
    summary="List jokes (optionally one device-shaped page)",
)
async def get_jokes(
    request: Request,
    page: Annotated[
        int | None,
        Query(
            ge=1,
            description="1-based page number; enables the device-aware paginated variant.",
        ),
    ] = None,
    service: JokeService = Depends(get_joke_service),
) -> Response:
    """Return every joke, or one page shaped for the requesting device."""
    result = await service.get_jokes()
    if page is None:
        return _respond(request, result, result.data)

    settings = get_settings()
    device = detect_device(request.headers.get("user-agent"))
    page_size = page_size_for(device, settings)
    pages = total_pages(len(result.data), page_size)
    if page > pages:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Page {page} not found; {pages} page(s) available.",
        )

    items = paginate(result.data, page, page_size)
    if device == "mobile":
        items = [
            project_for_mobile(joke, settings.mobile_content_max_length)
            for joke in items
        ]
    body = JokePage(data=items, page=page, total_pages=pages, device=device)
    return _respond(request, result, body.model_dump(by_alias=True))


@router.post(
    "/clear-cache",
    response_model=CacheCleared,
    summary="Flush the server-side jokes cache",
)
async def clear_cache(
    service: JokeService = Depends(get_joke_service),
) -> CacheCleared:
    """Drop cached jokes so the next request reads the store."""
    service.clear_cache()
    return CacheCleared()
