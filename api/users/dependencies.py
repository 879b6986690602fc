"""
Dependencies for user routes.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from .repository import UserStore

# SERIAL is a 4-byte integer column.
MAX_USER_ID = 2_147_483_647


def get_store(request: Request) -> UserStore:
    return request.app.state.user_store


def parse_user_id(raw: str) -> int:
    value = (raw or "").strip()
    if not (value.isascii() and value.isdigit()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User id must be a positive integer.",
        )

    user_id = int(value)
    if user_id < 1 or user_id > MAX_USER_ID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User id is out of range.",
        )
    return user_id
