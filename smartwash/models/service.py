# smartwash/models/service.py
"""Service catalog table. Read live by the workflow, edited by admins."""

from sqlalchemy import Column, String, Numeric, DateTime
from smartwash.database import Base
from smartwash.schemas.service import Service
from smartwash.utils.clock import utcnow


class ServiceRow(Base):
    __tablename__ = "services"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    updated_at = Column(DateTime)

    def to_schema(self) -> Service:
        return Service(id=self.id, name=self.name, price=self.price)

    @classmethod
    def from_schema(cls, service: Service) -> "ServiceRow":
        return cls(id=service.id, name=service.name, price=service.price, updated_at=utcnow())

    def update_from(self, service: Service):
        self.name = service.name
        self.price = service.price
        self.updated_at = utcnow()

    def __repr__(self):
        return f"<Service {self.id} name={self.name} price={self.price}>"
