# smartwash/routers/auth.py
"""Sign-in / sign-out. Login fails if the account has no profile."""

from fastapi import APIRouter, Depends, HTTPException, status

from smartwash.context import AppContext
from smartwash.exceptions import AuthenticationError
from smartwash.routers.deps import get_context, get_current_user, get_token
from smartwash.schemas.user import LoginOut, LoginRequest, UserProfile
from smartwash.services.auth_service import landing_for

router = APIRouter()


@router.post("/auth/login", response_model=LoginOut, summary="Sign in with email and password")
def login(body: LoginRequest, ctx: AppContext = Depends(get_context)):
    try:
        token, profile = ctx.auth.login(body.email, body.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return LoginOut(token=token, profile=profile, landing=landing_for(profile.role))


@router.post("/auth/logout", summary="Sign out and discard the open workflow")
def logout(token: str = Depends(get_token), ctx: AppContext = Depends(get_context)):
    uid = ctx.auth.logout(token)
    if uid:
        ctx.end_workflow(uid)
    return {"status": "signed_out"}


@router.get("/auth/me", response_model=UserProfile, summary="Current user profile")
def me(user: UserProfile = Depends(get_current_user)):
    return user
