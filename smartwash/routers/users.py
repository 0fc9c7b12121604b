# smartwash/routers/users.py
"""User management (Admin only)."""

from fastapi import APIRouter, Depends

from smartwash.context import AppContext
from smartwash.routers.deps import get_context, require_admin
from smartwash.schemas.user import UserCreate, UserProfile, UserUpdate

router = APIRouter()


@router.get("/users", response_model=list[UserProfile], summary="List users")
def list_users(ctx: AppContext = Depends(get_context), admin: UserProfile = Depends(require_admin)):
    return ctx.users.list_users()


@router.post("/users", response_model=UserProfile, summary="Add a user")
def create_user(body: UserCreate, ctx: AppContext = Depends(get_context),
                admin: UserProfile = Depends(require_admin)):
    return ctx.users.create_user(body)


@router.put("/users/{uid}", response_model=UserProfile, summary="Update a user")
def update_user(uid: str, body: UserUpdate, ctx: AppContext = Depends(get_context),
                admin: UserProfile = Depends(require_admin)):
    return ctx.users.update_user(uid, body)


@router.delete("/users/{uid}", summary="Delete a user")
def delete_user(uid: str, ctx: AppContext = Depends(get_context), admin: UserProfile = Depends(require_admin)):
    ctx.users.delete_user(uid, acting_uid=admin.uid)
    ctx.auth.sign_out_user(uid)
    ctx.end_workflow(uid)
    return {"status": "deleted", "uid": uid}
