# smartwash/routers/workflow.py
"""
Attendant workflow endpoints. Every call returns the full workflow state,
including any notices raised by that call.
"""

from fastapi import APIRouter, Depends

from smartwash.routers.deps import get_workflow
from smartwash.schemas.workflow import (
    NewVehicleRequest, PaymentRequest, PhotoCaptureRequest, PlateLookupRequest,
    PlateScanRequest, ServiceSelectionRequest, WorkflowStateOut,
)
from smartwash.services.workflow_engine import WorkflowEngine

router = APIRouter()


@router.get("/workflow", response_model=WorkflowStateOut, summary="Current workflow state")
def get_state(engine: WorkflowEngine = Depends(get_workflow)):
    return engine.snapshot()


@router.post("/workflow/plate", response_model=WorkflowStateOut, summary="Look up a licence plate")
def submit_plate(body: PlateLookupRequest, engine: WorkflowEngine = Depends(get_workflow)):
    engine.submit_plate(body)
    return engine.snapshot()


@router.post("/workflow/scan", response_model=WorkflowStateOut, summary="Read the plate from a photo")
async def scan_plate(body: PlateScanRequest, engine: WorkflowEngine = Depends(get_workflow)):
    await engine.scan_plate(body.photo_data_uri)
    return engine.snapshot()


@router.post("/workflow/photo", response_model=WorkflowStateOut, summary="Attach a vehicle photo")
def capture_photo(body: PhotoCaptureRequest, engine: WorkflowEngine = Depends(get_workflow)):
    engine.capture_photo(body.photo_data_uri)
    return engine.snapshot()


@router.post("/workflow/photo/cancel", response_model=WorkflowStateOut, summary="Close the camera")
def cancel_capture(engine: WorkflowEngine = Depends(get_workflow)):
    engine.cancel_capture()
    return engine.snapshot()


@router.post("/workflow/new-vehicle", response_model=WorkflowStateOut, summary="Register the looked-up plate")
def submit_new_vehicle(body: NewVehicleRequest, engine: WorkflowEngine = Depends(get_workflow)):
    engine.submit_new_vehicle(body)
    return engine.snapshot()


@router.post("/workflow/services", response_model=WorkflowStateOut, summary="Select services")
def select_services(body: ServiceSelectionRequest, engine: WorkflowEngine = Depends(get_workflow)):
    engine.select_services(body)
    return engine.snapshot()


@router.post("/workflow/payment", response_model=WorkflowStateOut, summary="Take payment and issue receipt")
def submit_payment(body: PaymentRequest, engine: WorkflowEngine = Depends(get_workflow)):
    engine.submit_payment(body)
    return engine.snapshot()


@router.post("/workflow/back", response_model=WorkflowStateOut, summary="Go back one step")
def back(engine: WorkflowEngine = Depends(get_workflow)):
    engine.back()
    return engine.snapshot()


@router.post("/workflow/start-new", response_model=WorkflowStateOut, summary="Start the next wash")
def start_new(engine: WorkflowEngine = Depends(get_workflow)):
    engine.start_new()
    return engine.snapshot()
