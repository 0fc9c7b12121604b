# smartwash/stores/service_catalog.py
"""Service catalog: read live by the workflow, edited from the admin screens."""

import uuid
from typing import List, Optional

from smartwash.exceptions import NotFoundError
from smartwash.schemas.service import Service, ServiceCreate, ServiceUpdate
from smartwash.stores.base import Repository
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SERVICES = [
    ("svc-1", "Exterior Wash", "50"),
    ("svc-2", "Interior Vacuum", "20"),
    ("svc-3", "Tire Shine", "15"),
    ("svc-4", "Wax & Polish", "80"),
    ("svc-5", "Engine Wash", "60"),
    ("svc-6", "Full Detail", "200"),
]


class ServiceCatalog:

    def __init__(self, repository: Repository[Service]):
        self._repo = repository

    def list(self) -> list[Service]:
        return self._repo.list()

    def get(self, service_id: str) -> Optional[Service]:
        return self._repo.get(service_id)

    def get_many(self, service_ids: List[str]) -> List[Service]:
        """Resolve ids in the given order. Raises NotFoundError on the first unknown id."""
        found = []
        for sid in service_ids:
            service = self._repo.get(sid)
            if service is None:
                raise NotFoundError(f"Unknown service: {sid}")
            found.append(service)
        return found

    def create(self, body: ServiceCreate) -> Service:
        service = Service(id=f"svc-{uuid.uuid4().hex[:8]}", name=body.name, price=body.price)
        self._repo.add(service.id, service)
        logger.info(f"[CATALOG] Added {service.name} at {service.price}")
        return service

    def update(self, service_id: str, body: ServiceUpdate) -> Service:
        current = self._repo.get(service_id)
        if current is None:
            raise NotFoundError(f"Unknown service: {service_id}")
        updated = Service(
            id=service_id,
            name=body.name if body.name is not None else current.name,
            price=body.price if body.price is not None else current.price,
        )
        self._repo.save(service_id, updated)
        logger.info(f"[CATALOG] Updated {service_id}: {updated.name} at {updated.price}")
        return updated

    def delete(self, service_id: str) -> None:
        if not self._repo.delete(service_id):
            raise NotFoundError(f"Unknown service: {service_id}")
        logger.info(f"[CATALOG] Deleted {service_id}")

    def seed_defaults(self) -> int:
        """Insert the default price list if the catalog is empty. Returns rows added."""
        if len(self._repo):
            return 0
        for sid, name, price in DEFAULT_SERVICES:
            self._repo.add(sid, Service(id=sid, name=name, price=price))
        logger.info(f"[CATALOG] Seeded {len(DEFAULT_SERVICES)} default services")
        return len(DEFAULT_SERVICES)
