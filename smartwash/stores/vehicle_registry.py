# smartwash/stores/vehicle_registry.py
"""
Vehicle Registry: known vehicles keyed by normalized licence plate.

insert() is first-writer-wins. If the plate is already present, or another
session wins the race at the storage layer, the stored entry is returned
unchanged. There is no update or delete.
"""

from typing import Optional

from smartwash.exceptions import DuplicateKeyError
from smartwash.schemas.vehicle import Vehicle, normalize_plate
from smartwash.stores.base import Repository
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)


class VehicleRegistry:

    def __init__(self, repository: Repository[Vehicle]):
        self._repo = repository

    def lookup(self, plate: str) -> Optional[Vehicle]:
        """Find a registered vehicle by plate. Returns None if not found."""
        return self._repo.get(normalize_plate(plate))

    def insert(self, vehicle: Vehicle) -> Vehicle:
        existing = self._repo.get(vehicle.license_plate)
        if existing:
            logger.info(f"[REGISTRY] {vehicle.license_plate} already registered, keeping first entry")
            return existing
        try:
            self._repo.add(vehicle.license_plate, vehicle)
        except DuplicateKeyError:
            logger.warning(f"[REGISTRY] {vehicle.license_plate} registered concurrently, using stored entry")
            return self._repo.get(vehicle.license_plate)
        logger.info(f"[REGISTRY] Registered {vehicle.license_plate} ({vehicle.type.value})")
        return vehicle

    def list(self) -> list[Vehicle]:
        return self._repo.list()

    def __len__(self) -> int:
        return len(self._repo)
