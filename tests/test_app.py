import pytest

from api import create_app
from api.config import DEV_ACCESS_SECRET, DEV_REFRESH_SECRET, DevelopmentConfig, ProductionConfig, TestingConfig, get_config


def test_get_config_by_name():
    assert get_config("prod") is ProductionConfig
    assert get_config("TESTING") is TestingConfig
    assert get_config("dev") is DevelopmentConfig


def test_shared_secret_refused(tmp_path):
    with pytest.raises(RuntimeError):
        create_app(
            "testing",
            overrides={
                "DATABASE_URL": f"sqlite:///{tmp_path / 'x.db'}",
                "JWT_ACCESS_SECRET": "same-secret-value-0123456789abcdef",
                "JWT_REFRESH_SECRET": "same-secret-value-0123456789abcdef",
            },
        )


def test_production_refuses_dev_secrets(tmp_path):
    with pytest.raises(RuntimeError):
        create_app(
            "production",
            overrides={
                "DATABASE_URL": f"sqlite:///{tmp_path / 'x.db'}",
                "JWT_ACCESS_SECRET": DEV_ACCESS_SECRET,
                "JWT_REFRESH_SECRET": DEV_REFRESH_SECRET,
            },
        )


def test_unknown_route_uses_error_envelope(client):
    res = client.get("/api/v1/nothing-here")
    assert res.status_code == 404
    assert res.get_json() == {"success": False, "error": res.get_json()["error"], "code": "NOT_FOUND"}


def test_root_points_to_docs(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.get_json()["docs"] == "/apidocs/"
