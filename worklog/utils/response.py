import math
from typing import Any, Dict, Optional

from fastapi import Query

from worklog.core.config import settings


class PageParams:
    """Query dependency for ``?page=&limit=`` on list endpoints."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    ):
        self.page = page
        self.limit = limit


def paginate(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def api_response(
    data: Any = None,
    message: str = "Success",
    pagination: Optional[Dict[str, int]] = None,
) -> Dict[str, Any]:
    """
    Build the response envelope shared by every endpoint.

    ``data`` and ``pagination`` are omitted when not supplied.
    """
    body: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    return body


def page_response(items: Any, params: PageParams, total: int, message: str = "Success") -> Dict[str, Any]:
    return api_response(
        data=items, message=message, pagination=paginate(params.page, params.limit, total)
    )
