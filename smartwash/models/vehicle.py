# smartwash/models/vehicle.py
"""
Registered vehicles table (Vehicle Registry backing store).
One row per normalized licence plate; the unique index is what makes
first-writer-wins hold when two attendants register the same plate.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from smartwash.database import Base
from smartwash.schemas.vehicle import Vehicle
from smartwash.utils.clock import utcnow


class VehicleRow(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    license_plate = Column(String(50), unique=True, nullable=False, index=True)
    vehicle_type = Column(String(20), nullable=False)  # Sedan | SUV | Truck | Minibus
    owner_name = Column(String(200))
    phone_number = Column(String(50))
    photo_data_uri = Column(Text)
    registered_at = Column(DateTime)

    def to_schema(self) -> Vehicle:
        return Vehicle(
            license_plate=self.license_plate,
            type=self.vehicle_type,
            owner_name=self.owner_name,
            phone_number=self.phone_number,
            photo_data_uri=self.photo_data_uri,
        )

    @classmethod
    def from_schema(cls, vehicle: Vehicle) -> "VehicleRow":
        return cls(
            license_plate=vehicle.license_plate,
            vehicle_type=vehicle.type.value,
            owner_name=vehicle.owner_name,
            phone_number=vehicle.phone_number,
            photo_data_uri=vehicle.photo_data_uri,
            registered_at=utcnow(),
        )

    def update_from(self, vehicle: Vehicle):
        self.vehicle_type = vehicle.type.value
        self.owner_name = vehicle.owner_name
        self.phone_number = vehicle.phone_number
        self.photo_data_uri = vehicle.photo_data_uri

    def __repr__(self):
        return f"<Vehicle {self.license_plate} type={self.vehicle_type} owner={self.owner_name}>"
