"""Test configuration and fixtures"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from fixtures.sample_payloads import daily_entry, payload_bytes
from fixtures.stubs import StubAccessor
from settings.store import ConfigurationStore
from sync.shared_store import SharedStore


@pytest.fixture
def source_a_payload() -> bytes:
    """Source A: 30 minutes on 2025-01-01"""
    return payload_bytes(
        {
            "2025-01-01": daily_entry(
                1800,
                languages={"python": 1200, "markdown": 600},
                repos={"codetrack": 1800},
            ),
        }
    )


@pytest.fixture
def source_b_payload() -> bytes:
    """Source B: 90 minutes on 2025-01-01 and an empty 2025-01-02"""
    return payload_bytes(
        {
            "2025-01-01": daily_entry(5400, languages={"python": 3600, "rust": 1800}),
            "2025-01-02": daily_entry(0),
        }
    )


@pytest.fixture
def stub_accessor(source_a_payload: bytes, source_b_payload: bytes) -> StubAccessor:
    return StubAccessor({"/data/a.json": source_a_payload, "/data/b.json": source_b_payload})


@pytest.fixture
def config_store(tmp_path: Path) -> ConfigurationStore:
    return ConfigurationStore(tmp_path / "settings.json")


@pytest.fixture
def shared_store():
    store = SharedStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Fixture for mocking environment variables"""

    def _set_env(**kwargs):
        for key, value in kwargs.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, str(value))

    return _set_env
