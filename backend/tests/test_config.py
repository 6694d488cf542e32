"""Settings — environment parsing for the start-up identity inputs."""

from schoolpay.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("SCHOOLPAY_APP_ID", raising=False)
    settings = Settings(_env_file=None)
    assert settings.app_id == "default-app-id"
    assert settings.initial_auth_token is None
    assert settings.firebase_api_key is None
    assert settings.status_display_seconds == 3.0


def test_blank_token_means_absent(monkeypatch):
    monkeypatch.setenv("SCHOOLPAY_INITIAL_AUTH_TOKEN", "   ")
    assert Settings(_env_file=None).initial_auth_token is None


def test_firebase_config_json(monkeypatch):
    monkeypatch.setenv(
        "SCHOOLPAY_FIREBASE_CONFIG", '{"apiKey": "k-123", "projectId": "school"}',
    )
    monkeypatch.setenv("SCHOOLPAY_INITIAL_AUTH_TOKEN", "tok")
    settings = Settings(_env_file=None)
    assert settings.firebase_api_key == "k-123"
    assert settings.initial_auth_token == "tok"
