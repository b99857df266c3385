"""
Global test configuration with support for different test types.
"""

from contextlib import suppress
import os

import pytest

from gemini_tutor.pipeline.tiered import TieredCaller
from gemini_tutor.sessions import SessionRegistry
from tests.helpers import ScriptedAdapter, make_config


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-in escape hatch: mark a test with @pytest.mark.allow_dotenv
    to permit .env loading for that specific test.
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_gemini_env(request, monkeypatch):
    """Ensure a clean GEMINI_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GEMINI_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)


@pytest.fixture(autouse=True)
def isolated_project_root(request, monkeypatch, tmp_path):
    """Run each test from an empty directory so no real pyproject.toml is found.

    Escape hatch: @pytest.mark.allow_project_config.
    """
    if request.node.get_closest_marker("allow_project_config"):
        return
    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Behavioral contracts of the orchestration layer",
        "integration: Component integration tests with mocked APIs",
        "api: Real API integration tests (requires API key)",
        "allow_dotenv: Permit .env loading",
        "allow_env_pollution: Keep GEMINI_* variables from the real environment",
        "allow_project_config: Do not isolate the working directory",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):  # noqa: ARG001
    """Automatically skip API tests when API key is unavailable."""
    if not (os.getenv("GEMINI_API_KEY") and os.getenv("ENABLE_API_TESTS")):
        skip_api = pytest.mark.skip(
            reason="API tests require GEMINI_API_KEY and ENABLE_API_TESTS=1",
        )
        for item in items:
            if "api" in item.keywords:
                item.add_marker(skip_api)


# --- Core Fixtures ---


@pytest.fixture
def frozen_config():
    return make_config()


@pytest.fixture
def caller(frozen_config):
    return TieredCaller(frozen_config)


@pytest.fixture
def registry_factory(caller):
    """Build a ``SessionRegistry`` over a scripted adapter."""

    def _make(adapter: ScriptedAdapter) -> SessionRegistry:
        return SessionRegistry(adapter, caller)

    return _make
