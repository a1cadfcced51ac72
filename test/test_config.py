"""
Tests for client configuration.
"""

from premium_api.config import PremiumSettings, get_settings


class TestPremiumSettings:
    def test_default_values(self) -> None:
        # Environment variables may override defaults; check the declared field defaults.
        fields = PremiumSettings.model_fields

        assert fields["base_url"].default == "https://premium.sales.lv"
        assert fields["api_version"].default == "1.0"
        assert fields["verify_tls"].default is True
        assert fields["connect_timeout_seconds"].default == 60.0
        assert fields["timeout_seconds"].default == 120.0
        assert fields["max_redirects"].default == 5
        assert fields["allow_url_open"].default is True
        assert fields["user_agent"].default == "SalesLV/Premium-API"

    def test_env_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("PREMIUM_API_KEY", "env-key")
        monkeypatch.setenv("PREMIUM_VERIFY_TLS", "false")
        monkeypatch.setenv("PREMIUM_MAX_REDIRECTS", "2")

        settings = PremiumSettings(_env_file=None)

        assert settings.api_key == "env-key"
        assert settings.verify_tls is False
        assert settings.max_redirects == 2

    def test_endpoint_prefix(self) -> None:
        settings = PremiumSettings(_env_file=None, base_url="https://premium.example.com/", api_version="1.1")

        assert settings.endpoint_prefix("KEY", "lottery") == (
            "https://premium.example.com/API:1.1/Key:KEY/Code:lottery/"
        )

    def test_endpoint_prefix_json(self) -> None:
        settings = PremiumSettings(
            _env_file=None, base_url="https://premium.example.com", json_format=True
        )

        assert settings.version_segment == "API:1.0:json"


class TestGetSettings:
    def test_returns_fresh_instance_under_pytest(self, monkeypatch) -> None:
        monkeypatch.setenv("PREMIUM_CAMPAIGN_CODE", "from-env")

        settings = get_settings()

        assert isinstance(settings, PremiumSettings)
        assert settings.campaign_code == "from-env"
