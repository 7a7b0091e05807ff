"""
Caller identity for API routes.

Authentication is done upstream by the managed auth provider, which forwards
the authenticated user's ID in the ``X-User-ID`` header.
"""

from typing import Optional

from fastapi import Header, HTTPException

from coach.logging_config import bind_user_context


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Return the caller's user ID or reject the request with 401."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authorized")

    user_id = x_user_id.strip()
    bind_user_context(user_id)
    return user_id
