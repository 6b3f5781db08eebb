import pytest

from wallet import KdfParams, SecretStore, StealthWallet


@pytest.fixture
def fast_kdf():
    """Argon2id parameters cheap enough for tests."""
    return KdfParams(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "stealth.store"


@pytest.fixture
def secret_store(store_path, fast_kdf):
    return SecretStore.open(store_path, "correct horse", fast_kdf)


@pytest.fixture
def wallet(store_path, fast_kdf):
    return StealthWallet.open(store_path, "correct horse", fast_kdf)


@pytest.fixture
def app_home(tmp_path, monkeypatch):
    """Point the application data directory at a temporary folder."""
    home = tmp_path / "home"
    monkeypatch.setenv("STEALTH_WALLET_HOME", str(home))
    return home
