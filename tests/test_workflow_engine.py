# tests/test_workflow_engine.py
"""
Unit tests for the attendant workflow state machine.
Stores are in memory; OCR and messaging are mocked.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import pytest
from decimal import Decimal
from unittest.mock import MagicMock
from pydantic import ValidationError
from smartwash.exceptions import (
    InvalidTransitionError, NotificationError, OcrError, PersistenceError, WorkflowValidationError,
)
from smartwash.schemas.service import ServiceUpdate
from smartwash.schemas.transaction import PaymentMethod
from smartwash.schemas.vehicle import Vehicle, VehicleType
from smartwash.schemas.workflow import (
    NewVehicleRequest, PaymentRequest, PlateLookupRequest, ServiceSelectionRequest, WorkflowStep,
)
from smartwash.services.workflow_engine import WorkflowEngine

PHOTO = "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQ=="


def to_payment(engine, service_ids=("svc-1", "svc-3"), plate="abc 123", vtype="SUV", phone=None):
    engine.submit_plate(PlateLookupRequest(license_plate=plate))
    if engine.step == WorkflowStep.NEW_VEHICLE:
        engine.submit_new_vehicle(NewVehicleRequest(type=vtype, owner_name="Alice", phone_number=phone))
    engine.select_services(ServiceSelectionRequest(service_ids=list(service_ids)))


def titles(engine):
    return [n.title for n in engine.drain_notices()]


class TestHappyPath:
    def test_new_vehicle_cash_scenario(self, engine, stores):
        assert engine.submit_plate(PlateLookupRequest(license_plate="abc 123")) == WorkflowStep.NEW_VEHICLE
        assert engine.pending_plate == "ABC123"
        assert engine.plate_field == "ABC123"

        assert engine.submit_new_vehicle(NewVehicleRequest(type="SUV")) == WorkflowStep.SERVICES
        assert stores.registry.lookup("ABC123").type == VehicleType.SUV

        assert engine.select_services(ServiceSelectionRequest(service_ids=["svc-1", "svc-3"])) \
            == WorkflowStep.PAYMENT
        assert engine.total == Decimal("65")

        assert engine.submit_payment(PaymentRequest(payment_method="Cash")) == WorkflowStep.RECEIPT
        txn = engine.transaction
        assert txn.total_amount == Decimal("65")
        assert txn.payment.method == PaymentMethod.CASH
        assert txn.attendant_id == "user-2"
        assert stores.ledger.list() == [txn]
        assert "Transaction Complete!" in titles(engine)

    def test_known_vehicle_skips_registration(self, engine, stores):
        stores.registry.insert(Vehicle(license_plate="XYZ789", type="Truck"))
        assert engine.submit_plate(PlateLookupRequest(license_plate="xyz 789")) == WorkflowStep.SERVICES
        assert engine.vehicle.type == VehicleType.TRUCK
        assert engine.pending_plate is None

    def test_photo_attached_to_new_vehicle(self, engine, stores):
        engine.capture_photo(PHOTO)
        engine.submit_plate(PlateLookupRequest(license_plate="ABC123"))
        engine.submit_new_vehicle(NewVehicleRequest(type="Sedan"))
        assert stores.registry.lookup("ABC123").photo_data_uri == PHOTO

    def test_every_selection_totals_to_price_sum(self, engine, stores):
        catalog = stores.catalog.list()
        for i in range(1, len(catalog) + 1):
            chosen = catalog[:i]
            to_payment(engine, service_ids=[s.id for s in chosen])
            engine.submit_payment(PaymentRequest(payment_method="Cash"))
            txn = engine.transaction
            assert txn.total_amount == sum((s.price for s in chosen), Decimal("0"))
            assert txn.payment.amount == txn.total_amount
            engine.start_new()


class TestPaymentValidation:
    def test_mobile_money_without_reference_blocked(self, engine, stores):
        to_payment(engine)
        with pytest.raises(ValidationError):
            PaymentRequest(payment_method="Mobile Money", reference="  ")
        assert engine.step == WorkflowStep.PAYMENT
        assert len(stores.ledger) == 0

    def test_mobile_money_with_reference(self, engine):
        to_payment(engine)
        engine.submit_payment(PaymentRequest(payment_method="Mobile Money", reference="MM-12345"))
        assert engine.transaction.payment.reference == "MM-12345"

    def test_corporate_account_not_taken_at_counter(self):
        with pytest.raises(ValidationError):
            PaymentRequest(payment_method="Corporate Account")

    def test_empty_selection_rejected(self):
        with pytest.raises(ValidationError):
            ServiceSelectionRequest(service_ids=[])

    def test_unknown_service_rejected(self, engine):
        to_payment(engine)
        engine.back()
        with pytest.raises(WorkflowValidationError) as exc_info:
            engine.select_services(ServiceSelectionRequest(service_ids=["svc-404"]))
        assert exc_info.value.field == "service_ids"
        assert engine.step == WorkflowStep.SERVICES

    def test_notification_without_phone_rejected(self, engine, stores):
        to_payment(engine)
        with pytest.raises(WorkflowValidationError):
            engine.submit_payment(PaymentRequest(payment_method="Cash", send_notification=True))
        assert engine.step == WorkflowStep.PAYMENT
        assert len(stores.ledger) == 0

    def test_total_follows_live_catalog_price(self, engine, stores):
        to_payment(engine)
        stores.catalog.update("svc-1", ServiceUpdate(price=Decimal("55")))
        assert engine.total == Decimal("70")
        engine.submit_payment(PaymentRequest(payment_method="Cash"))
        assert engine.transaction.total_amount == Decimal("70")


class TestPersistence:
    def test_offline_goes_to_queue(self, engine, stores, connectivity):
        connectivity.set_forced_offline(True)
        to_payment(engine)
        engine.submit_payment(PaymentRequest(payment_method="Cash"))

        assert engine.step == WorkflowStep.RECEIPT
        assert len(stores.ledger) == 0
        assert stores.queue.pending() == [engine.transaction]
        assert "Transaction Saved Offline" in titles(engine)

    def test_save_offline_flag_goes_to_queue(self, engine, stores):
        to_payment(engine)
        engine.submit_payment(PaymentRequest(payment_method="Cash", save_offline=True))
        assert len(stores.ledger) == 0
        assert len(stores.queue) == 1

    def test_ledger_failure_keeps_payment_step(self, engine, stores):
        to_payment(engine)
        stores.ledger.add_transaction = MagicMock(side_effect=PersistenceError("backing store down"))
        engine.drain_notices()

        assert engine.submit_payment(PaymentRequest(payment_method="Cash")) == WorkflowStep.PAYMENT
        assert engine.transaction is None
        notices = engine.drain_notices()
        assert notices[0].level == "error"

    def test_lookup_failure_keeps_vehicle_step(self, engine, stores):
        stores.registry.lookup = MagicMock(side_effect=PersistenceError("down"))
        assert engine.submit_plate(PlateLookupRequest(license_plate="ABC123")) == WorkflowStep.VEHICLE
        assert "Lookup Failed" in titles(engine)


class TestReceiptNotification:
    def test_receipt_sent_after_commit(self, engine, stores, notifier):
        def check_committed(destination, text):
            assert len(stores.ledger) == 1
            assert "Total: K65.00" in text
            return "https://wa.me/260977123456?text=receipt"
        notifier.send.side_effect = check_committed

        to_payment(engine, phone="260977123456")
        engine.submit_payment(PaymentRequest(payment_method="Cash", send_notification=True))

        notifier.send.assert_called_once()
        assert notifier.send.call_args[0][0] == "260977123456"
        assert engine.notification_link == "https://wa.me/260977123456?text=receipt"

    def test_notification_failure_does_not_roll_back(self, engine, stores, notifier):
        notifier.send.side_effect = NotificationError("webhook down")
        to_payment(engine, phone="260977123456")
        engine.submit_payment(PaymentRequest(payment_method="Cash", send_notification=True))

        assert engine.step == WorkflowStep.RECEIPT
        assert len(stores.ledger) == 1
        assert "Receipt Not Sent" in titles(engine)

    def test_receipt_uses_configured_currency(self, attendant, stores, scanner, notifier, connectivity):
        engine = WorkflowEngine(
            attendant=attendant, registry=stores.registry, ledger=stores.ledger, queue=stores.queue,
            catalog=stores.catalog, scanner=scanner, notifier=notifier, connectivity=connectivity,
            business_name="Spillway Car Wash", currency="ZMW ",
        )
        to_payment(engine, phone="260977123456")
        engine.submit_payment(PaymentRequest(payment_method="Cash", send_notification=True))

        text = notifier.send.call_args[0][1]
        assert "Total: ZMW 65.00" in text

    def test_no_notification_unless_requested(self, engine, notifier):
        to_payment(engine, phone="260977123456")
        engine.submit_payment(PaymentRequest(payment_method="Cash"))
        notifier.send.assert_not_called()


class TestNavigation:
    def test_back_from_new_vehicle(self, engine):
        engine.submit_plate(PlateLookupRequest(license_plate="ABC123"))
        assert engine.back() == WorkflowStep.VEHICLE
        assert engine.pending_plate is None

    def test_back_from_services_clears_vehicle(self, engine):
        engine.submit_plate(PlateLookupRequest(license_plate="ABC123"))
        engine.submit_new_vehicle(NewVehicleRequest(type="Sedan"))
        assert engine.back() == WorkflowStep.VEHICLE
        assert engine.vehicle is None

    def test_back_from_payment_keeps_selection(self, engine):
        to_payment(engine)
        assert engine.back() == WorkflowStep.SERVICES
        assert engine.selected_service_ids == ["svc-1", "svc-3"]

    def test_back_not_allowed_from_vehicle_or_receipt(self, engine):
        with pytest.raises(InvalidTransitionError):
            engine.back()
        to_payment(engine)
        engine.submit_payment(PaymentRequest(payment_method="Cash"))
        with pytest.raises(InvalidTransitionError):
            engine.back()

    def test_operation_outside_its_step(self, engine):
        with pytest.raises(InvalidTransitionError):
            engine.select_services(ServiceSelectionRequest(service_ids=["svc-1"]))
        with pytest.raises(InvalidTransitionError):
            engine.submit_payment(PaymentRequest())

    def test_start_new_resets_everything(self, engine):
        engine.capture_photo(PHOTO)
        to_payment(engine)
        engine.submit_payment(PaymentRequest(payment_method="Cash"))

        assert engine.start_new() == WorkflowStep.VEHICLE
        assert engine.plate_field == ""
        assert engine.vehicle is None
        assert engine.pending_plate is None
        assert engine.photo_data_uri is None
        assert engine.selected_service_ids == []
        assert engine.transaction is None
        assert engine.total == Decimal("0")

    def test_start_new_only_from_receipt(self, engine):
        with pytest.raises(InvalidTransitionError):
            engine.start_new()


class TestCamera:
    def test_invalid_photo_rejected(self, engine):
        with pytest.raises(WorkflowValidationError):
            engine.capture_photo("not-a-data-uri")
        assert engine.photo_data_uri is None

    def test_cancel_capture_changes_nothing(self, engine):
        engine.cancel_capture()
        assert engine.step == WorkflowStep.VEHICLE
        assert engine.photo_data_uri is None

    @pytest.mark.asyncio
    async def test_scan_fills_plate_field(self, engine, scanner):
        scanner.scan.return_value = "abc 123"
        assert await engine.scan_plate(PHOTO) == "ABC123"
        assert engine.plate_field == "ABC123"
        assert engine.step == WorkflowStep.VEHICLE
        assert engine.is_scanning is False

    @pytest.mark.asyncio
    async def test_unreadable_scan_warns(self, engine, scanner):
        engine.plate_field = "OLD1"
        scanner.scan.return_value = ""
        assert await engine.scan_plate(PHOTO) == ""
        assert engine.plate_field == "OLD1"
        notices = engine.drain_notices()
        assert notices[0].level == "warning"

    @pytest.mark.asyncio
    async def test_scan_error_becomes_notice(self, engine, scanner):
        scanner.scan.side_effect = OcrError("upstream 500")
        assert await engine.scan_plate(PHOTO) is None
        assert engine.is_scanning is False
        assert "Scan Error" in titles(engine)

    @pytest.mark.asyncio
    async def test_second_scan_rejected_while_first_in_flight(self, engine, scanner):
        release = asyncio.Event()
        started = asyncio.Event()

        async def slow_scan(photo):
            started.set()
            await release.wait()
            return "ABC123"
        scanner.scan.side_effect = slow_scan

        first = asyncio.create_task(engine.scan_plate(PHOTO))
        await started.wait()
        assert engine.is_scanning is True

        with pytest.raises(WorkflowValidationError):
            await engine.scan_plate(PHOTO)

        release.set()
        assert await first == "ABC123"
        assert engine.is_scanning is False
        assert scanner.scan.await_count == 1

    @pytest.mark.asyncio
    async def test_scan_only_on_vehicle_step(self, engine):
        engine.submit_plate(PlateLookupRequest(license_plate="ABC123"))
        with pytest.raises(InvalidTransitionError):
            await engine.scan_plate(PHOTO)


class TestSnapshot:
    def test_snapshot_hands_notices_over_once(self, engine):
        engine.submit_plate(PlateLookupRequest(license_plate="ABC123"))
        engine.submit_new_vehicle(NewVehicleRequest(type="Sedan", phone_number="260977123456"))

        first = engine.snapshot()
        assert first.step == WorkflowStep.SERVICES
        assert first.can_notify is True
        assert [n.title for n in first.notices] == ["Vehicle Registered"]
        assert engine.snapshot().notices == []
