import logging
from typing import Iterable, Optional

from fastapi import Header, HTTPException

from . import config

logger = logging.getLogger(__name__)


def is_authorized(email: Optional[str], allowed: Optional[Iterable[str]] = None) -> bool:
    """Check an email against the household allow-list.

    An empty allow-list admits everyone, which is what local development
    runs with.
    """
    allowed = {a.lower() for a in (config.ALLOWED_EMAILS if allowed is None else allowed)}
    if not allowed:
        return True
    return bool(email) and email.strip().lower() in allowed


def require_user(x_user_email: Optional[str] = Header(None)):
    if not is_authorized(x_user_email):
        logger.warning("rejected request from %r", x_user_email)
        raise HTTPException(status_code=403, detail="Not on the household allow-list")
    return x_user_email
