# SmartWash POS: database models
# Import all models here for SQLAlchemy discovery

from smartwash.models.service import ServiceRow                   # noqa
from smartwash.models.vehicle import VehicleRow                   # noqa
from smartwash.models.transaction import TransactionRow           # noqa
from smartwash.models.user import UserCredential, UserProfileRow  # noqa
from smartwash.models.offline_queue import QueuedTransactionRow   # noqa
