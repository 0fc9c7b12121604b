# smartwash/routers/deps.py
"""FastAPI dependencies: application context, signed-in user, role guard, workflow."""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from smartwash.context import AppContext
from smartwash.exceptions import AuthenticationError
from smartwash.schemas.user import UserProfile, UserRole
from smartwash.services.workflow_engine import WorkflowEngine


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_token(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return authorization.split(" ", 1)[1].strip()


def get_current_user(token: str = Depends(get_token), ctx: AppContext = Depends(get_context)) -> UserProfile:
    try:
        return ctx.auth.resolve(token)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


def require_admin(user: UserProfile = Depends(get_current_user)) -> UserProfile:
    if user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user


def get_workflow(user: UserProfile = Depends(get_current_user),
                 ctx: AppContext = Depends(get_context)) -> WorkflowEngine:
    return ctx.workflow_for(user)
