from pathlib import Path

import pytest

from localcreds.config.settings import reset_settings
from localcreds.models.core import Credential
from tests.factories import CredentialFactory

ENCRYPTION_KEY = CredentialFactory.DEFAULT_KEY
NAMESPACE = CredentialFactory.DEFAULT_NAMESPACE

_ENV_VARS = (
    "APP_DATA_DIR_OVERRIDE",
    "LOCALCREDS_APP_DATA_DIR",
    "LOCALCREDS_CIPHER_MODE",
    "LOCALCREDS_RESTRICT_FILE_PERMISSIONS",
    "LOCALCREDS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def app_data_dir(tmp_path, monkeypatch) -> Path:
    override = tmp_path / "appdata"
    monkeypatch.setenv("APP_DATA_DIR_OVERRIDE", str(override))
    reset_settings()
    return override


@pytest.fixture
def namespace_dir(app_data_dir) -> Path:
    return app_data_dir / NAMESPACE


@pytest.fixture
def test_credential() -> Credential:
    return CredentialFactory.create_credential(id="1", token="test-token")


@pytest.fixture
def encryption_key() -> str:
    return ENCRYPTION_KEY
