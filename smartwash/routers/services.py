# smartwash/routers/services.py
"""Service catalog: everyone can read it, admins edit it."""

from fastapi import APIRouter, Depends

from smartwash.context import AppContext
from smartwash.routers.deps import get_context, get_current_user, require_admin
from smartwash.schemas.service import Service, ServiceCreate, ServiceUpdate

router = APIRouter()


@router.get("/services", response_model=list[Service], summary="Service catalog",
            dependencies=[Depends(get_current_user)])
def list_services(ctx: AppContext = Depends(get_context)):
    return ctx.catalog.list()


@router.post("/services", response_model=Service, summary="Add a service", dependencies=[Depends(require_admin)])
def create_service(body: ServiceCreate, ctx: AppContext = Depends(get_context)):
    return ctx.catalog.create(body)


@router.put("/services/{service_id}", response_model=Service, summary="Update a service",
            dependencies=[Depends(require_admin)])
def update_service(service_id: str, body: ServiceUpdate, ctx: AppContext = Depends(get_context)):
    return ctx.catalog.update(service_id, body)


@router.delete("/services/{service_id}", summary="Delete a service", dependencies=[Depends(require_admin)])
def delete_service(service_id: str, ctx: AppContext = Depends(get_context)):
    ctx.catalog.delete(service_id)
    return {"status": "deleted", "id": service_id}
