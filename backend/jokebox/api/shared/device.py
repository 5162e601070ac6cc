"""Device-aware response shaping for the paginated jokes variant.

All device classes share one server cache; the mobile projection and page
size are applied per response.
"""

from __future__ import annotations

import math
import re
from typing import Any, Sequence

from jokebox.core.config import Settings
from jokebox.models.jokes import DeviceClass

_MOBILE_USER_AGENT = re.compile(
    r"Mobile|Android|iPhone|iPad|iPod|Opera Mini|IEMobile|BlackBerry", re.IGNORECASE
)
TEXT_FIELDS = ("body", "content")
ELLIPSIS = "..."


def detect_device(user_agent: str | None) -> DeviceClass:
    """Classify a request as mobile or desktop from its User-Agent."""
    if user_agent and _MOBILE_USER_AGENT.search(user_agent):
        return "mobile"
    return "desktop"


def page_size_for(device: DeviceClass, settings: Settings) -> int:
    if device == "mobile":
        return settings.mobile_page_size
    return settings.desktop_page_size


def total_pages(item_count: int, page_size: int) -> int:
    """Number of pages needed for the items; at least one."""
    return max(1, math.ceil(item_count / page_size))


def paginate(
    items: Sequence[dict[str, Any]], page: int, page_size: int
) -> list[dict[str, Any]]:
    """Return the 1-based page slice."""
    start = (page - 1) * page_size
    return list(items[start : start + page_size])


def project_for_mobile(
    joke: dict[str, Any], max_length: int
) -> dict[str, Any]:
    """Copy of the joke with its text field truncated to ``max_length``."""
    projected = dict(joke)
    for name in TEXT_FIELDS:
        value = projected.get(name)
        if isinstance(value, str) and len(value) > max_length:
            projected[name] = value[:max_length].rstrip() + ELLIPSIS
    return projected


__all__ = [
    "detect_device",
    "page_size_for",
    "paginate",
    "project_for_mobile",
    "total_pages",
]
