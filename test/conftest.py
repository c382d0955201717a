"""
Pytest configuration and fixtures for the plugin CMS tests
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

# Keep the import-time engine away from any developer database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import cms.database as database_module  # noqa: E402
from cms.config import Settings  # noqa: E402
from cms.plugins.manager import PluginSystem  # noqa: E402
from cms.plugins.state import JsonFileStateBackend  # noqa: E402
from utils.plugins import factory_for  # noqa: E402


@pytest.fixture
def file_backend(tmp_path) -> JsonFileStateBackend:
    return JsonFileStateBackend(tmp_path / "plugins_state.json")


@pytest.fixture
def build_system(file_backend):
    """Build a PluginSystem over the given definitions and a file backend."""

    def _build(*definitions, modules=None) -> PluginSystem:
        module_map = dict(modules or {})
        for definition in definitions:
            module_map.setdefault(definition.id, factory_for(definition))
        return PluginSystem(modules=module_map, backend=file_backend)

    return _build


@pytest.fixture
def test_database(tmp_path, monkeypatch) -> async_sessionmaker[AsyncSession]:
    """
    Point the application's engine and session factory at a fresh SQLite
    file for this test. NullPool keeps connections from crossing the event
    loops of asyncio.run and TestClient.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)
    monkeypatch.setattr(database_module, "engine", engine)
    monkeypatch.setattr(database_module, "AsyncSessionLocal", session_factory)
    return session_factory


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        admin_api_key=None,
        auto_create_tables=True,
        plugin_state_backend="file",
        plugin_state_file=tmp_path / "plugins_state.json",
        extra_plugin_modules={},
    )


@pytest.fixture
def make_client(test_settings, test_database):
    """Start the app (lifespan included) around a PluginSystem."""
    from main import create_app

    clients: list[TestClient] = []

    def _make(plugin_system=None, settings=None, **client_kwargs) -> TestClient:
        app_settings = settings or test_settings
        system = plugin_system or PluginSystem.from_settings(app_settings)
        client = TestClient(create_app(settings=app_settings, plugin_system=system), **client_kwargs)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    """App with the built-in plugins and file-backed plugin state."""
    return make_client()
