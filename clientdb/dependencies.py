# clientdb/dependencies.py
from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session
from typing import Optional
import logging

from clientdb.config import Settings
from clientdb.database import get_db
from clientdb.middleware import RateLimitExceeded, client_ip
from clientdb.services.clients import ClientService

logger = logging.getLogger(__name__)


# =============================================================================
# SETTINGS / SERVICES
# =============================================================================

def get_settings(request: Request) -> Settings:
    """Settings the app was created with"""
    return request.app.state.settings


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    return ClientService(db)


# =============================================================================
# RATE LIMITING
# =============================================================================

async def rate_limit(request: Request, response: Response) -> None:
    """
    Count the request against the caller's IP window.

    Raises:
        RateLimitExceeded: When the IP has used up its window
    """
    limiter = request.app.state.rate_limiter
    ip = client_ip(request)
    allowed, remaining, retry_after = limiter.hit(ip)

    if not allowed:
        logger.warning(f"Rate limit exceeded for {ip} on {request.url.path}")
        raise RateLimitExceeded(retry_after=retry_after, limit=limiter.max_requests)

    response.headers["RateLimit-Limit"] = str(limiter.max_requests)
    response.headers["RateLimit-Remaining"] = str(remaining)


# =============================================================================
# PAGINATION
# =============================================================================

def _positive_int(value: Optional[str], default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


class PaginationParams:
    """
    Reusable pagination parameters.

    Query values are taken as strings so that absent, non-numeric or
    non-positive values fall back to the defaults instead of failing.
    """

    def __init__(
        self,
        request: Request,
        page: Optional[str] = None,
        limit: Optional[str] = None,
    ):
        settings = get_settings(request)
        self.page = _positive_int(page, 1)
        self.limit = min(settings.MAX_PAGE_SIZE, _positive_int(limit, settings.DEFAULT_PAGE_SIZE))
