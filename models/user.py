from enum import Enum

from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import Base, BaseModel

DEFAULT_PROFILE_IMAGE = "default-profile.jpg"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModel, Base):
    __tablename__ = "users"

    name = Column(String(50), nullable=False)
    # Always stored lower-cased; the unique index makes email case-insensitive
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=False)
    role = Column(SAEnum(Role, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
                  nullable=False, default=Role.USER)
    active = Column(Boolean, nullable=False, default=True)
    phone = Column(String(15), nullable=True)
    address = Column(String(200), nullable=True)
    profile_image = Column(String(255), nullable=False, default=DEFAULT_PROFILE_IMAGE)

    sessions = relationship(
        "SessionRecord",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
