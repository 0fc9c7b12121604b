# smartwash/models/user.py
"""
Users: credentials and profiles live in separate tables.
A credential without a profile is an integrity anomaly: login refuses it.
"""

from sqlalchemy import Column, String, DateTime
from smartwash.database import Base
from smartwash.schemas.user import UserProfile
from smartwash.utils.clock import utcnow


class UserCredential(Base):
    __tablename__ = "user_credentials"

    uid = Column(String(64), primary_key=True)
    email = Column(String(200), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<UserCredential {self.uid} email={self.email}>"


class UserProfileRow(Base):
    __tablename__ = "user_profiles"

    uid = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False)   # Admin | Attendant

    def to_schema(self) -> UserProfile:
        return UserProfile(uid=self.uid, name=self.name, email=self.email, role=self.role)

    @classmethod
    def from_schema(cls, profile: UserProfile) -> "UserProfileRow":
        return cls(uid=profile.uid, name=profile.name, email=profile.email, role=profile.role.value)

    def update_from(self, profile: UserProfile):
        self.name = profile.name
        self.email = profile.email
        self.role = profile.role.value

    def __repr__(self):
        return f"<UserProfile {self.uid} role={self.role}>"
