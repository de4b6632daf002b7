from __future__ import annotations

import asyncio
import logging

import pytest

from keeper.client.bootstrap import configure_logging, create_store
from keeper.client.state import Store
from keeper.shared.core.configuration import LoggingConfig, SystemConfig
from keeper.shared.domain.auth.models import LoginCredentials, SessionStatus, ThemeMode
from keeper.shared.infrastructure.persistence import DuckDBKeyValueStore, InMemoryKeyValueStore

from conftest import FlakyKeyValueStore, RejectingVerifier


def _memory_config(**session) -> SystemConfig:
    return SystemConfig.model_validate({"storage": {"backend": "memory"}, "session": session})


@pytest.mark.asyncio
async def test_from_config_shares_backend_and_bus():
    store = Store.from_config(_memory_config())

    assert isinstance(store.kv_store, InMemoryKeyValueStore)
    assert store.session.kv is store.kv_store
    assert store.preferences.kv is store.kv_store
    assert store.session.bus is store.event_bus
    assert store.preferences.bus is store.event_bus


@pytest.mark.asyncio
async def test_from_config_applies_session_settings():
    store = Store.from_config(
        _memory_config(user_storage_key="USER", auth_timeout_seconds=1.5, reject_concurrent=False),
        verifier=RejectingVerifier(),
    )
    assert store.session.storage_key == "USER"
    assert store.session.auth_timeout == 1.5
    assert store.session.reject_concurrent is False
    assert isinstance(store.session.verifier, RejectingVerifier)


@pytest.mark.asyncio
async def test_initialize_restores_both_stores():
    kv = InMemoryKeyValueStore({"@app_theme": "dark"})
    store = Store.from_config(_memory_config(), kv_store=kv)

    await store.initialize()

    assert store.session.state.status is SessionStatus.UNAUTHENTICATED
    assert store.preferences.mode is ThemeMode.DARK
    assert store.preferences.state.is_loading is False


@pytest.mark.asyncio
async def test_initialize_with_failing_backend_does_not_hang():
    kv = FlakyKeyValueStore()
    kv.fail_get = True
    store = Store.from_config(_memory_config(), kv_store=kv)

    await asyncio.wait_for(store.initialize(), timeout=1.0)

    assert store.session.state.is_initializing is False
    assert store.preferences.state.is_loading is False


@pytest.mark.asyncio
async def test_full_cycle_on_duckdb_across_restart(tmp_path):
    config = SystemConfig.model_validate({"storage": {"backend": "duckdb", "db_path": str(tmp_path / "app.duckdb")}})

    first = await create_store(config, setup_logging=False)
    result = await first.session.login(LoginCredentials(email="a@b.com", password="x"))
    first.preferences.toggle()
    await first.close()

    second = await create_store(config, setup_logging=False)
    assert isinstance(second.kv_store, DuckDBKeyValueStore)
    assert second.session.state.is_authenticated is True
    assert second.session.state.user.id == result.user.id
    assert second.preferences.mode is ThemeMode.DARK

    await second.session.logout()
    await second.close()

    third = await create_store(config, setup_logging=False)
    assert third.session.state.is_authenticated is False
    await third.close()


def test_configure_logging_installs_handlers(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging(LoggingConfig(level="DEBUG", log_file=str(tmp_path / "logs" / "keeper.log")))
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert (tmp_path / "logs").is_dir()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


@pytest.mark.asyncio
async def test_close_does_not_wait_forever_on_stuck_observer():
    kv = FlakyKeyValueStore()
    store = Store.from_config(_memory_config(), kv_store=kv)
    await store.initialize()
    release = asyncio.Event()

    async def stuck(payload):
        await release.wait()

    await store.event_bus.subscribe("preference.changed", stuck)
    store.preferences.toggle()

    await asyncio.wait_for(store.close(timeout=0.1), timeout=2.0)

    assert kv.calls[-1] == ("close",)
    assert kv.snapshot()["@app_theme"] == "dark"
    release.set()
    await store.event_bus.wait_until_idle(timeout=1.0)
