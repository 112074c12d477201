import pytest

from nsstore.common.config import Settings, get_settings


def test_defaults():
    settings = Settings()

    assert settings.namespaced_bucket == "hyper-storage-namespaced-local"
    assert settings.PUT_URL_EXPIRES_SECONDS == 300
    assert settings.GET_URL_EXPIRES_SECONDS == 3600
    assert settings.AWS_REGION == "us-east-1"


@pytest.mark.parametrize("prefix", ["", "x" * 33])
def test_invalid_bucket_prefix(prefix):
    with pytest.raises(ValueError, match="BUCKET_PREFIX"):
        Settings(BUCKET_PREFIX=prefix)


def test_prefix_of_max_length():
    assert Settings(BUCKET_PREFIX="x" * 32).namespaced_bucket.endswith("x" * 32)


def test_non_positive_expiry():
    with pytest.raises(ValueError):
        Settings(GET_URL_EXPIRES_SECONDS=0)


def test_from_environment(monkeypatch):
    monkeypatch.setenv("BUCKET_PREFIX", "staging")
    monkeypatch.setenv("BUCKET_NAME_PREFIX", "acme-store")
    monkeypatch.setenv("AWS_REGION", "eu-west-1")
    monkeypatch.setenv("S3_USE_SSL", "false")
    monkeypatch.setenv("PUT_URL_EXPIRES_SECONDS", "60")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

    settings = get_settings()

    assert settings.namespaced_bucket == "acme-store-staging"
    assert settings.AWS_REGION == "eu-west-1"
    assert settings.S3_USE_SSL is False
    assert settings.PUT_URL_EXPIRES_SECONDS == 60
    assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]
    assert get_settings() is settings
