"""
Pytest configuration and shared fixtures for the store tests.
"""
import pytest

from tradestore.db import DataAccess, StoreConfig, dispose_engines


@pytest.fixture
def store_config(tmp_path):
    """Store config pointing at a fresh SQLite file."""
    return StoreConfig(database_path=str(tmp_path / "tda.db"), lock_retries=1)


@pytest.fixture
def access(store_config):
    """DataAccess bound to the per-test store file."""
    yield DataAccess(store_config)
    dispose_engines()


@pytest.fixture
def unconfigured_access():
    """DataAccess with no store path set."""
    return DataAccess(StoreConfig())


@pytest.fixture
def no_queries(monkeypatch):
    """Fail the test if a DataAccess read reaches the store."""

    def _guard(access):
        def _fail(*args, **kwargs):
            raise AssertionError("store was queried")

        monkeypatch.setattr(access, "_fetch_rows", _fail)
        monkeypatch.setattr(access, "run_statements", _fail)
        return access

    return _guard
