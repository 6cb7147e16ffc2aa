"""Tests for the setup verification script's provider report."""

from app.config import Settings
from scripts.verify_setup import check_providers, describe_providers


class TestProviderReport:
    """Test configured versus active providers."""

    def test_all_mock_by_default(self, capsys):
        settings = Settings(_env_file=None)

        assert describe_providers(settings) == {
            "sms": "mock",
            "email": "mock",
            "whatsapp": "mock",
        }
        assert check_providers(settings) is True

    def test_missing_credentials_flagged(self, capsys):
        """Test a vendor downgraded to mock fails the check."""
        settings = Settings(
            _env_file=None,
            sms_provider="twilio",
            email_provider="sendgrid",
            sendgrid_api_key="SG.key",
        )

        assert describe_providers(settings)["email"] == "sendgrid"
        assert check_providers(settings) is False
        assert "twilio has missing credentials" in capsys.readouterr().out
