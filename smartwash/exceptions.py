# smartwash/exceptions.py
"""
Error taxonomy shared by stores, services and routers.

  - validation errors     → raised before any state change (HTTP 422)
  - invalid transitions   → workflow step not allowed in current state (HTTP 409)
  - collaborator failures → OCR, sync, persistence, messaging, auth
  - integrity anomalies   → authenticated identity without a profile
"""

from typing import Optional


class SmartWashError(Exception):
    """Base class for every domain error raised by this package."""


# ── Validation ────────────────────────────────────────────────────────────────
class WorkflowValidationError(SmartWashError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidTransitionError(SmartWashError):
    def __init__(self, operation: str, state: str):
        super().__init__(f"'{operation}' is not allowed in workflow state '{state}'")
        self.operation = operation
        self.state = state


# ── Storage ───────────────────────────────────────────────────────────────────
class DuplicateKeyError(SmartWashError):
    def __init__(self, key: str):
        super().__init__(f"Key already exists: {key}")
        self.key = key


class NotFoundError(SmartWashError):
    pass


class PersistenceError(SmartWashError):
    """A write to the ledger, registry or queue backend failed."""


# ── Collaborators ─────────────────────────────────────────────────────────────
class OcrError(SmartWashError):
    pass


class InvalidImageError(OcrError):
    pass


class NotificationError(SmartWashError):
    pass


class SyncError(SmartWashError):
    def __init__(self, message: str, delivered: int = 0, remaining: int = 0):
        super().__init__(message)
        self.delivered = delivered
        self.remaining = remaining


class SyncInProgressError(SmartWashError):
    def __init__(self):
        super().__init__("A sync is already in progress")


# ── Authentication ────────────────────────────────────────────────────────────
class AuthenticationError(SmartWashError):
    pass


class ProfileMissingError(AuthenticationError):
    def __init__(self, uid: str):
        super().__init__(f"Login failed: user profile not found for {uid}")
        self.uid = uid


class PermissionDeniedError(SmartWashError):
    pass
