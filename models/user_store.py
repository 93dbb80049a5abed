"""
Credential store: lookups over active user accounts.

Deactivated users are filtered out of every read, so they can neither log in
nor refresh a session.
"""
from __future__ import annotations

from typing import Optional

from models.db_storage import DBStorage
from models.user import User, Role


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def _active(self):
        return self.storage.get_session().query(User).filter(User.active.is_(True))

    def get_active(self, user_id: str) -> Optional[User]:
        return self._active().filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[User]:
        return self._active().filter(User.email == normalize_email(email)).first()

    def email_taken(self, email: str) -> bool:
        # Deactivated accounts keep their email reserved
        session = self.storage.get_session()
        return session.query(User.id).filter(User.email == normalize_email(email)).first() is not None

    def create(self, name: str, email: str, password_hash: str, role: Role = Role.USER, **fields) -> User:
        user = User(
            name=name,
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
            active=True,
            **fields,
        )
        self.storage.new(user)
        return user
