"""Unit tests for configuration and settings."""
from common.config import Settings, get_settings, reset_settings_cache


class TestSettings:
    def test_get_settings_returns_same_instance(self):
        assert get_settings() is get_settings()

    def test_reset_settings_cache(self):
        settings1 = get_settings()
        reset_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

    def test_database_url_from_environment(self):
        assert get_settings().database_url.startswith("sqlite")

    def test_jwt_configuration(self):
        settings = get_settings()

        assert settings.jwt_secret
        assert settings.jwt_algorithm == "HS256"
        assert settings.access_token_expire_minutes == 120

    def test_rate_limiting_disabled_for_tests(self):
        assert get_settings().rate_limiting_enabled is False

    def test_service_ports_configuration(self):
        settings = get_settings()

        assert settings.users_service_port == 8001
        assert settings.rooms_service_port == 8002
        assert settings.bookings_service_port == 8003
        assert settings.admin_service_port == 8004

    def test_invoice_identity_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.hotel_name == "The Grand Hotel"
        assert settings.currency_label == "Rs."

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("HOTEL_NAME", "Harbour Inn")
        monkeypatch.setenv("SEED_ROOMS_ON_STARTUP", "true")

        settings = Settings(_env_file=None)

        assert settings.hotel_name == "Harbour Inn"
        assert settings.seed_rooms_on_startup is True
