# smartwash/services/workflow_engine.py
"""
Attendant workflow: one car wash from plate entry to receipt.

    vehicle ──found──────────────▶ services ──▶ payment ──▶ receipt
       │                              ▲                        │
       └─not found─▶ new-vehicle ─────┘                        │
       ▲                                                       │
       └────────────────────── start_new ◀─────────────────────┘

back():  new-vehicle → vehicle, services → vehicle, payment → services

How it works:
  - Request structs are validated on construction; anything else the engine
    rejects raises WorkflowValidationError before touching state.
  - Collaborator failures (registry, catalog, ledger, queue, OCR, messaging)
    are logged and turned into a Notice; the step does not advance.
  - The transaction is committed to the ledger (online) or the offline queue
    (offline or save_offline) before the receipt is handed to the customer.
    A failed hand-off never undoes the commit.
"""

from decimal import Decimal
from typing import Optional

from smartwash.config import settings
from smartwash.exceptions import (
    InvalidImageError, InvalidTransitionError, NotFoundError, NotificationError,
    OcrError, PersistenceError, WorkflowValidationError,
)
from smartwash.schemas.service import Service
from smartwash.schemas.transaction import Transaction, services_total
from smartwash.schemas.user import UserProfile
from smartwash.schemas.vehicle import Vehicle, normalize_plate
from smartwash.schemas.workflow import (
    NewVehicleRequest, Notice, PaymentRequest, PlateLookupRequest,
    ServiceSelectionRequest, WorkflowStateOut, WorkflowStep,
)
from smartwash.services.connectivity import ConnectivityMonitor
from smartwash.services.notification_service import NotificationSender
from smartwash.services.ocr_service import PlateScanner, parse_data_uri
from smartwash.services.receipt_service import format_receipt_text
from smartwash.stores.offline_queue import OfflineQueue
from smartwash.stores.service_catalog import ServiceCatalog
from smartwash.stores.transaction_ledger import TransactionLedger
from smartwash.stores.vehicle_registry import VehicleRegistry
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)


class WorkflowEngine:

    def __init__(self, attendant: UserProfile, registry: VehicleRegistry, ledger: TransactionLedger,
                 queue: OfflineQueue, catalog: ServiceCatalog, scanner: PlateScanner,
                 notifier: NotificationSender, connectivity: ConnectivityMonitor,
                 business_name: str = None, currency: str = None):
        self.attendant = attendant
        self._registry = registry
        self._ledger = ledger
        self._queue = queue
        self._catalog = catalog
        self._scanner = scanner
        self._notifier = notifier
        self._connectivity = connectivity
        self._business_name = business_name or settings.BUSINESS_NAME
        self._currency = currency if currency is not None else settings.CURRENCY_SYMBOL

        self._step = WorkflowStep.VEHICLE
        self.plate_field = ""
        self._pending_plate: Optional[str] = None
        self._vehicle: Optional[Vehicle] = None
        self._photo: Optional[str] = None
        self._selected_ids: list[str] = []
        self._transaction: Optional[Transaction] = None
        self._is_scanning = False
        self._notification_link: Optional[str] = None
        self._notices: list[Notice] = []

    # ── Read-only state ──────────────────────────────────────────────────────
    @property
    def step(self) -> WorkflowStep:
        return self._step

    @property
    def vehicle(self) -> Optional[Vehicle]:
        return self._vehicle

    @property
    def pending_plate(self) -> Optional[str]:
        return self._pending_plate

    @property
    def photo_data_uri(self) -> Optional[str]:
        return self._photo

    @property
    def selected_service_ids(self) -> list[str]:
        return list(self._selected_ids)

    @property
    def transaction(self) -> Optional[Transaction]:
        return self._transaction

    @property
    def is_scanning(self) -> bool:
        return self._is_scanning

    @property
    def notification_link(self) -> Optional[str]:
        return self._notification_link

    @property
    def can_notify(self) -> bool:
        return bool(self._vehicle and self._vehicle.phone_number)

    def selected_services(self) -> list[Service]:
        """Current selection resolved against the live catalog; removed services drop out."""
        services = []
        for sid in self._selected_ids:
            service = self._catalog.get(sid)
            if service is not None:
                services.append(service)
        return services

    @property
    def total(self) -> Decimal:
        if not self._selected_ids:
            return Decimal("0")
        try:
            return services_total(self.selected_services())
        except PersistenceError as e:
            logger.warning(f"[WORKFLOW] Catalog unavailable while totalling: {e}")
            return Decimal("0")

    # ── Notices ──────────────────────────────────────────────────────────────
    def _notify_user(self, title: str, message: str = "", level: str = "info"):
        self._notices.append(Notice(level=level, title=title, message=message))

    def drain_notices(self) -> list[Notice]:
        notices, self._notices = self._notices, []
        return notices

    def snapshot(self) -> WorkflowStateOut:
        """Current state for the client. Pending notices are handed over once."""
        return WorkflowStateOut(
            step=self._step,
            plate_field=self.plate_field,
            pending_plate=self._pending_plate,
            vehicle=self._vehicle,
            selected_service_ids=self.selected_service_ids,
            total=self.total,
            transaction=self._transaction,
            is_scanning=self._is_scanning,
            has_photo=self._photo is not None,
            can_notify=self.can_notify,
            notification_link=self._notification_link,
            notices=self.drain_notices(),
        )

    def _require(self, operation: str, *steps: WorkflowStep):
        if self._step not in steps:
            raise InvalidTransitionError(operation, self._step.value)

    # ── vehicle ──────────────────────────────────────────────────────────────
    def submit_plate(self, request: PlateLookupRequest) -> WorkflowStep:
        self._require("submit_plate", WorkflowStep.VEHICLE)
        plate = request.license_plate
        self.plate_field = plate
        try:
            vehicle = self._registry.lookup(plate)
        except PersistenceError as e:
            logger.error(f"[WORKFLOW] Lookup of {plate} failed: {e}")
            self._notify_user("Lookup Failed", "Could not search vehicles. Please try again.", "error")
            return self._step

        if vehicle:
            self._vehicle = vehicle
            self._step = WorkflowStep.SERVICES
            logger.info(f"[WORKFLOW] {self.attendant.uid}: known vehicle {plate}")
        else:
            self._pending_plate = plate
            self._step = WorkflowStep.NEW_VEHICLE
            logger.info(f"[WORKFLOW] {self.attendant.uid}: new vehicle {plate}")
        return self._step

    async def scan_plate(self, photo_data_uri: str) -> Optional[str]:
        """
        Read the plate from a photo and put it in the plate field.
        Returns the plate, "" when unreadable, None on a collaborator error.
        """
        self._require("scan_plate", WorkflowStep.VEHICLE)
        if self._is_scanning:
            raise WorkflowValidationError("A scan is already in progress", field="photo_data_uri")
        self._is_scanning = True
        try:
            plate = await self._scanner.scan(photo_data_uri)
        except InvalidImageError as e:
            raise WorkflowValidationError(str(e), field="photo_data_uri") from e
        except OcrError as e:
            logger.error(f"[WORKFLOW] Plate scan failed: {e}")
            self._notify_user("Scan Error", "An unexpected error occurred during the scan.", "error")
            return None
        finally:
            self._is_scanning = False

        plate = normalize_plate(plate)
        if not plate:
            self._notify_user("Scan Failed",
                              "Could not read the license plate. Please try again or enter it manually.",
                              "warning")
            return ""
        self.plate_field = plate
        self._notify_user("Scan Successful!", f"License plate set to {plate}.")
        return plate

    # ── camera ───────────────────────────────────────────────────────────────
    def capture_photo(self, photo_data_uri: str):
        self._require("capture_photo", WorkflowStep.VEHICLE, WorkflowStep.NEW_VEHICLE)
        try:
            parse_data_uri(photo_data_uri)
        except InvalidImageError as e:
            raise WorkflowValidationError(str(e), field="photo_data_uri") from e
        self._photo = photo_data_uri
        self._notify_user("Photo captured!")

    def cancel_capture(self):
        logger.debug(f"[WORKFLOW] {self.attendant.uid}: camera closed without capture")

    # ── new-vehicle ──────────────────────────────────────────────────────────
    def submit_new_vehicle(self, request: NewVehicleRequest) -> WorkflowStep:
        self._require("submit_new_vehicle", WorkflowStep.NEW_VEHICLE)
        vehicle = Vehicle(
            license_plate=self._pending_plate,
            type=request.type,
            owner_name=request.owner_name,
            phone_number=request.phone_number,
            photo_data_uri=self._photo,
        )
        try:
            stored = self._registry.insert(vehicle)
        except PersistenceError as e:
            logger.error(f"[WORKFLOW] Registering {vehicle.license_plate} failed: {e}")
            self._notify_user("Registration Failed", "Could not save the vehicle. Please try again.", "error")
            return self._step

        self._vehicle = stored
        self._step = WorkflowStep.SERVICES
        self._notify_user("Vehicle Registered", f"{stored.license_plate} has been added.")
        return self._step

    # ── services ─────────────────────────────────────────────────────────────
    def select_services(self, request: ServiceSelectionRequest) -> WorkflowStep:
        self._require("select_services", WorkflowStep.SERVICES)
        try:
            self._catalog.get_many(request.service_ids)
        except NotFoundError as e:
            raise WorkflowValidationError(str(e), field="service_ids") from e
        except PersistenceError as e:
            logger.error(f"[WORKFLOW] Catalog unavailable: {e}")
            self._notify_user("Services Unavailable", "Could not load services. Please try again.", "error")
            return self._step

        self._selected_ids = list(request.service_ids)
        self._step = WorkflowStep.PAYMENT
        return self._step

    # ── payment ──────────────────────────────────────────────────────────────
    def submit_payment(self, request: PaymentRequest) -> WorkflowStep:
        self._require("submit_payment", WorkflowStep.PAYMENT)
        vehicle = self._vehicle
        if request.send_notification and not self.can_notify:
            raise WorkflowValidationError("This vehicle has no phone number to send the receipt to",
                                          field="send_notification")
        try:
            services = self._catalog.get_many(self._selected_ids)
        except NotFoundError as e:
            raise WorkflowValidationError(f"{e}. Please reselect services.", field="service_ids") from e
        except PersistenceError as e:
            logger.error(f"[WORKFLOW] Catalog unavailable at payment: {e}")
            self._notify_user("Payment Failed", "Could not load services. Please try again.", "error")
            return self._step

        txn = Transaction.build(
            license_plate=vehicle.license_plate,
            services=services,
            method=request.payment_method,
            reference=request.reference,
            attendant_id=self.attendant.uid,
            attendant_name=self.attendant.name,
        )

        offline = request.save_offline or not self._connectivity.is_online()
        try:
            if offline:
                self._queue.enqueue(txn)
            else:
                self._ledger.add_transaction(txn)
        except PersistenceError as e:
            logger.error(f"[WORKFLOW] Could not record {txn.id}: {e}")
            self._notify_user("Transaction Not Saved",
                              "The transaction could not be recorded. Try again or save it offline.", "error")
            return self._step

        self._transaction = txn
        self._step = WorkflowStep.RECEIPT
        if offline:
            self._notify_user("Transaction Saved Offline", "It will be synced when internet is available.")
        else:
            self._notify_user("Transaction Complete!", f"Wash for {txn.license_plate} has been recorded.")

        if request.send_notification:
            self._send_receipt(txn, vehicle)
        return self._step

    def _send_receipt(self, txn: Transaction, vehicle: Vehicle):
        text = format_receipt_text(txn, self._business_name, self._currency)
        try:
            self._notification_link = self._notifier.send(vehicle.phone_number, text)
        except NotificationError as e:
            logger.warning(f"[WORKFLOW] Receipt hand-off for {txn.id} failed: {e}")
            self._notify_user("Receipt Not Sent", "The transaction is saved, but the receipt could not be sent.",
                              "warning")

    # ── navigation ───────────────────────────────────────────────────────────
    def back(self) -> WorkflowStep:
        if self._step == WorkflowStep.NEW_VEHICLE:
            self._pending_plate = None
            self._step = WorkflowStep.VEHICLE
        elif self._step == WorkflowStep.SERVICES:
            self._vehicle = None
            self._pending_plate = None
            self._selected_ids = []
            self._step = WorkflowStep.VEHICLE
        elif self._step == WorkflowStep.PAYMENT:
            self._step = WorkflowStep.SERVICES
        else:
            raise InvalidTransitionError("back", self._step.value)
        return self._step

    def start_new(self) -> WorkflowStep:
        self._require("start_new", WorkflowStep.RECEIPT)
        self.plate_field = ""
        self._pending_plate = None
        self._vehicle = None
        self._photo = None
        self._selected_ids = []
        self._transaction = None
        self._notification_link = None
        self._step = WorkflowStep.VEHICLE
        return self._step
