"""
Test fixtures and configuration for pytest.
"""
from datetime import datetime, timedelta

import pytest

from api import create_app
from models.db_storage import DBStorage
from models.session_store import SessionStore
from models.user import Role
from models.user_store import UserStore
from utils.security import hash_password
from utils.session_manager import SessionManager
from utils.tokens import TokenCodec

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"
PASSWORD = "Passw0rd!"


class FakeClock:
    """Naive UTC clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 15, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def codec(clock):
    return TokenCodec(ACCESS_SECRET, REFRESH_SECRET, clock=clock)


# ============== Service-level fixtures (no Flask) ==============


@pytest.fixture
def storage(tmp_path):
    s = DBStorage(f"sqlite:///{tmp_path / 'unit.db'}")
    s.reload()
    yield s
    s.close()
    s.engine.dispose()


@pytest.fixture
def users(storage):
    return UserStore(storage)


@pytest.fixture
def manager(codec, storage, users, clock):
    return SessionManager(
        codec=codec,
        storage=storage,
        sessions=SessionStore(storage, ttl=timedelta(days=7)),
        users=users,
        clock=clock,
    )


@pytest.fixture
def make_user(users, storage):
    def _make(email="alice@example.com", role=Role.USER, name="Alice"):
        user = users.create(name=name, email=email, password_hash=hash_password(PASSWORD), role=role, phone="9876543210")
        storage.save()
        return user

    return _make


# ============== Application fixtures ==============


@pytest.fixture
def app(tmp_path, clock):
    app = create_app(
        "testing",
        overrides={
            "DATABASE_URL": f"sqlite:///{tmp_path / 'app.db'}",
            "JWT_ACCESS_SECRET": ACCESS_SECRET,
            "JWT_REFRESH_SECRET": REFRESH_SECRET,
        },
        clock=clock,
    )
    yield app
    app.extensions["storage"].engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    def _register(email="alice@example.com", name="Alice", phone="9876543210", password=PASSWORD):
        res = client.post(
            "/api/v1/auth/register",
            json={"name": name, "email": email, "password": password, "phone": phone},
        )
        assert res.status_code == 201, res.get_json()
        return res.get_json()

    return _register


@pytest.fixture
def login(client):
    def _login(email="alice@example.com", password=PASSWORD):
        res = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.get_json()
        return res.get_json()

    return _login


@pytest.fixture
def user_tokens(register, login):
    register()
    return login()


@pytest.fixture
def admin_tokens(app, login):
    with app.app_context():
        users = app.extensions["user_store"]
        users.create(
            name="Admin",
            email="admin@example.com",
            password_hash=hash_password(PASSWORD),
            role=Role.ADMIN,
        )
        app.extensions["storage"].save()
    return login(email="admin@example.com")


@pytest.fixture
def create_product(client, admin_tokens):
    def _create(name="Herbal Tea", category="Beverages", sizes=None, stock=10, description="Calming blend"):
        res = client.post(
            "/api/v1/products",
            headers=auth_header(admin_tokens["token"]),
            json={
                "name": name,
                "description": description,
                "category": category,
                "stock": stock,
                "image": "https://cdn.example.com/tea.jpg",
                "sizes": sizes or [{"size": "100g", "price": "4.50"}, {"size": "250g", "price": "9.99"}],
            },
        )
        assert res.status_code == 201, res.get_json()
        return res.get_json()["data"]

    return _create
