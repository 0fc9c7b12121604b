# smartwash/services/user_service.py
"""Admin user management: credentials and profiles are always written together."""

import uuid

from sqlalchemy.exc import IntegrityError

from smartwash.exceptions import DuplicateKeyError, NotFoundError, PermissionDeniedError
from smartwash.models.user import UserCredential, UserProfileRow
from smartwash.schemas.user import UserCreate, UserProfile, UserUpdate
from smartwash.services.auth_service import hash_password
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)


class UserService:

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def list_users(self) -> list[UserProfile]:
        with self._session_factory() as db:
            return [row.to_schema() for row in db.query(UserProfileRow).order_by(UserProfileRow.name).all()]

    def get_user(self, uid: str) -> UserProfile:
        with self._session_factory() as db:
            row = db.get(UserProfileRow, uid)
            if not row:
                raise NotFoundError(f"User not found: {uid}")
            return row.to_schema()

    def _commit(self, db, email: str):
        """Commit, turning a lost race on the unique email index into DuplicateKeyError."""
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateKeyError(email)

    def _email_taken(self, db, email: str, uid: str = None) -> bool:
        q = db.query(UserCredential).filter(UserCredential.email == email)
        if uid:
            q = q.filter(UserCredential.uid != uid)
        return q.first() is not None

    def create_user(self, body: UserCreate) -> UserProfile:
        email = body.email.strip().lower()
        uid = f"user-{uuid.uuid4().hex[:12]}"
        with self._session_factory() as db:
            if self._email_taken(db, email):
                raise DuplicateKeyError(email)
            db.add(UserCredential(uid=uid, email=email, password_hash=hash_password(body.password)))
            db.add(UserProfileRow(uid=uid, name=body.name, email=email, role=body.role.value))
            self._commit(db, email)
        logger.info(f"[USERS] Added {email} as {body.role.value}")
        return UserProfile(uid=uid, name=body.name, email=email, role=body.role)

    def update_user(self, uid: str, body: UserUpdate) -> UserProfile:
        with self._session_factory() as db:
            profile = db.get(UserProfileRow, uid)
            cred = db.get(UserCredential, uid)
            if not profile or not cred:
                raise NotFoundError(f"User not found: {uid}")
            if body.email is not None:
                email = body.email.strip().lower()
                if self._email_taken(db, email, uid):
                    raise DuplicateKeyError(email)
                profile.email = email
                cred.email = email
            if body.name is not None:
                profile.name = body.name
            if body.role is not None:
                profile.role = body.role.value
            if body.password:
                cred.password_hash = hash_password(body.password)
            self._commit(db, profile.email)
            logger.info(f"[USERS] Updated {uid}")
            return profile.to_schema()

    def delete_user(self, uid: str, acting_uid: str):
        if uid == acting_uid:
            raise PermissionDeniedError("You cannot delete your own account.")
        with self._session_factory() as db:
            profile = db.get(UserProfileRow, uid)
            cred = db.get(UserCredential, uid)
            if not profile and not cred:
                raise NotFoundError(f"User not found: {uid}")
            for row in (profile, cred):
                if row is not None:
                    db.delete(row)
            db.commit()
        logger.info(f"[USERS] Deleted {uid}")

    def ensure_user(self, email: str, password: str, name: str, role) -> bool:
        """Create the account if the email is unused. Returns True when created."""
        with self._session_factory() as db:
            if self._email_taken(db, email.strip().lower()):
                return False
        self.create_user(UserCreate(name=name, email=email, role=role, password=password))
        return True
