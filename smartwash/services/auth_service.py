# smartwash/services/auth_service.py
"""
Email/password sign-in backed by the user_credentials and user_profiles tables.

A session is only established when both the credential and the profile exist.
An identity whose profile is missing is signed out everywhere (all its tokens
dropped) instead of being left half-authenticated.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from smartwash.config import settings
from smartwash.exceptions import AuthenticationError, ProfileMissingError
from smartwash.models.user import UserCredential, UserProfileRow
from smartwash.schemas.user import UserProfile, UserRole
from smartwash.utils.clock import utcnow
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)

_HASH_ALGO = "pbkdf2_sha256"
_HASH_ITERATIONS = 200_000


def hash_password(password: str, salt: Optional[bytes] = None, iterations: int = _HASH_ITERATIONS) -> str:
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{_HASH_ALGO}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algo, iterations, salt_hex, digest_hex = encoded.split("$")
    except ValueError:
        return False
    if algo != _HASH_ALGO:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations))
    return hmac.compare_digest(digest.hex(), digest_hex)


def landing_for(role: UserRole) -> str:
    return "/admin" if role == UserRole.ADMIN else "/dashboard"


@dataclass
class _Session:
    uid: str
    expires_at: datetime


class AuthService:

    def __init__(self, session_factory, token_ttl_minutes: int = None):
        self._session_factory = session_factory
        self._ttl = timedelta(minutes=token_ttl_minutes or settings.SESSION_TOKEN_TTL_MINUTES)
        self._sessions: dict[str, _Session] = {}

    def _load_profile(self, uid: str) -> Optional[UserProfile]:
        with self._session_factory() as db:
            row = db.get(UserProfileRow, uid)
            return row.to_schema() if row else None

    def login(self, email: str, password: str) -> tuple[str, UserProfile]:
        """Returns (token, profile). Raises AuthenticationError / ProfileMissingError."""
        with self._session_factory() as db:
            cred = db.query(UserCredential).filter(UserCredential.email == email.strip().lower()).first()
            if not cred or not verify_password(password, cred.password_hash):
                logger.warning(f"[AUTH] Failed login for {email}")
                raise AuthenticationError("Invalid email or password")
            uid = cred.uid

        profile = self._load_profile(uid)
        if profile is None:
            logger.warning(f"[AUTH] {uid} has credentials but no profile, signing out")
            self.sign_out_user(uid)
            raise ProfileMissingError(uid)

        token = secrets.token_urlsafe(32)
        self._sessions[token] = _Session(uid=uid, expires_at=utcnow() + self._ttl)
        logger.info(f"[AUTH] {profile.email} signed in as {profile.role.value}")
        return token, profile

    def resolve(self, token: str) -> UserProfile:
        """Profile behind a bearer token. The profile is re-read on every call."""
        session = self._sessions.get(token or "")
        if session is None:
            raise AuthenticationError("Not signed in")
        if session.expires_at <= utcnow():
            self._sessions.pop(token, None)
            raise AuthenticationError("Session expired")
        profile = self._load_profile(session.uid)
        if profile is None:
            logger.warning(f"[AUTH] Profile for {session.uid} disappeared, ending its sessions")
            self.sign_out_user(session.uid)
            raise ProfileMissingError(session.uid)
        return profile

    def logout(self, token: str) -> Optional[str]:
        """Drop one token. Returns the uid it belonged to."""
        session = self._sessions.pop(token, None)
        return session.uid if session else None

    def sign_out_user(self, uid: str) -> int:
        tokens = [t for t, s in self._sessions.items() if s.uid == uid]
        for t in tokens:
            del self._sessions[t]
        return len(tokens)

    def active_sessions(self) -> int:
        return len(self._sessions)
