"""
User CRUD endpoints.

Mounted under `/api/{resource}` by `main.create_app`, so the collection lives
at `/api/{resource}/users` and single records at `/api/{resource}/users/{id}`.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from . import schemas
from .dependencies import get_store, parse_user_id
from .repository import UserNotFound, UserStore

router = APIRouter()

DELETED_MESSAGE = "User deleted"


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")


@router.get("/users")
async def list_users(store: UserStore = Depends(get_store)) -> list[schemas.User]:
    return await store.list_all()


@router.post("/users")
async def create_user(
    payload: schemas.UserPayload,
    store: UserStore = Depends(get_store),
) -> schemas.User:
    return await store.create(payload.name, payload.email)


@router.get("/users/{user_id}")
async def get_user(user_id: str, store: UserStore = Depends(get_store)) -> schemas.User:
    try:
        return await store.get_by_id(parse_user_id(user_id))
    except UserNotFound as exc:
        raise _not_found() from exc


@router.put("/users/{user_id}")
async def update_user(
    user_id: str,
    payload: schemas.UserPayload,
    store: UserStore = Depends(get_store),
) -> schemas.User:
    try:
        return await store.update(parse_user_id(user_id), payload.name, payload.email)
    except UserNotFound as exc:
        raise _not_found() from exc


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, store: UserStore = Depends(get_store)) -> str:
    try:
        await store.delete(parse_user_id(user_id))
    except UserNotFound as exc:
        raise _not_found() from exc
    return DELETED_MESSAGE
