"""Smoke tests for create_app() wiring (no lifespan, so no network)."""

from config import AppSettings, DatabaseSettings


def _settings() -> AppSettings:
    return AppSettings(
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        docs_url=None,
    )


class TestCreateApp:
    def test_routes_registered(self):
        from app import create_app

        app = create_app(_settings())
        paths = set(app.openapi()["paths"])
        assert "/health" in paths
        assert "/api/otp/send" in paths
        assert "/api/otp/verify" in paths
        assert "/api/otp/check-email" in paths
        assert "/api/registration-config/{registration_type}" in paths

    def test_docs_disabled(self):
        from app import create_app

        app = create_app(_settings())
        assert app.docs_url is None
