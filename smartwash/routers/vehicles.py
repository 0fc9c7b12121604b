# smartwash/routers/vehicles.py
"""Vehicle Registry: list, look up, register (first registration of a plate wins)."""

from fastapi import APIRouter, Depends

from smartwash.context import AppContext
from smartwash.routers.deps import get_context, get_current_user
from smartwash.schemas.vehicle import Vehicle, VehicleLookupOut, normalize_plate

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/vehicles", response_model=list[Vehicle], summary="List registered vehicles")
def list_vehicles(vehicle_type: str = None, ctx: AppContext = Depends(get_context)):
    vehicles = ctx.registry.list()
    if vehicle_type:
        vehicles = [v for v in vehicles if v.type.value == vehicle_type]
    return vehicles


@router.get("/vehicles/lookup/{plate}", response_model=VehicleLookupOut, summary="Look up a plate number")
def lookup_vehicle(plate: str, ctx: AppContext = Depends(get_context)):
    vehicle = ctx.registry.lookup(plate)
    return VehicleLookupOut(plate=normalize_plate(plate), registered=vehicle is not None, vehicle=vehicle)


@router.post("/vehicles", response_model=Vehicle, summary="Register a vehicle")
def register_vehicle(body: Vehicle, ctx: AppContext = Depends(get_context)):
    """Returns the stored entry, which is the existing one if the plate was already registered."""
    return ctx.registry.insert(body)
