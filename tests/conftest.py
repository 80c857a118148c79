"""Pytest configuration for otsdaq_installer tests."""

import pytest

from otsdaq_installer.config import load_settings
from otsdaq_installer.config.loader import ENV_VAR
from otsdaq_installer.models import InstallConfig

from tests.utils import RecordingEngine, deps_fetcher


@pytest.fixture(autouse=True)
def _no_site_override(monkeypatch):
    monkeypatch.delenv(ENV_VAR, raising=False)
    monkeypatch.delenv("PRODUCTS", raising=False)


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def engine(tmp_path):
    return RecordingEngine(extra_env={"MRB_SOURCE": str(tmp_path / "srcs")})


@pytest.fixture
def fetcher(settings):
    return deps_fetcher(settings)


@pytest.fixture
def make_cfg(tmp_path):
    def _make(**kwargs):
        kwargs.setdefault("base_dir", tmp_path)
        return InstallConfig.from_options(**kwargs)

    return _make
