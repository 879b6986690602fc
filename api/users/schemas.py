"""
Pydantic schemas for user endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel


class UserPayload(BaseModel):
    # Missing fields decode as empty strings; no further validation.
    name: str = ""
    email: str = ""


class User(BaseModel):
    id: int
    name: str
    email: str
