"""
Accessors for the per-app services built in create_app().
"""
from flask import current_app, g

from models.db_storage import DBStorage
from models.user import User
from models.user_store import UserStore
from utils.auth_errors import AuthError, AuthErrorKind
from utils.session_manager import SessionManager


def get_storage() -> DBStorage:
    return current_app.extensions["storage"]


def get_users() -> UserStore:
    return current_app.extensions["user_store"]


def get_session_manager() -> SessionManager:
    return current_app.extensions["session_manager"]


def get_current_user() -> User:
    """Active user behind g.auth; a deactivated account counts as a dead session."""
    user = get_users().get_active(g.auth.subject_id)
    if user is None:
        raise AuthError(AuthErrorKind.SESSION_NOT_FOUND)
    return user
