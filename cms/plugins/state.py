"""
Plugin State Store

Persisted per-plugin state (enabled flag, public path override, opaque
settings blob), kept apart from the in-process registry.

Backends implement four async operations keyed by plugin id: get, list,
upsert and delete. Two backends ship with the CMS:

    DatabaseStateBackend   SQLAlchemy, table `plugin_states`
    JsonFileStateBackend   a JSON document on disk (data/plugins_state.json)

PluginStateStore layers the plugin semantics on top: enable requires a
registered definition, disable/update_settings upsert, update_public_path
requires an existing record, and lifecycle hook failures are logged and
swallowed without rolling back the state change. Reads tolerate an
unavailable backend by returning empty results.
"""

from __future__ import annotations

import copy
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cms import database
from cms.exceptions import PluginNotRegisteredError, PluginStateNotFoundError, StateStoreUnavailableError
from cms.models.plugin_state import PluginStateRecord
from cms.plugins.types import PluginInstance, PluginState

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from cms.plugins.registry import PluginRegistry
    from cms.plugins.types import PluginDefinition

logger = logging.getLogger(__name__)

_STATE_FIELDS = ("enabled", "custom_public_path", "settings")


class PluginStateBackend(Protocol):
    """Backing persistence consumed by PluginStateStore."""

    async def get(self, plugin_id: str) -> Optional[PluginState]: ...

    async def list(self) -> list[PluginState]: ...

    async def upsert(self, plugin_id: str, values: dict[str, Any]) -> PluginState: ...

    async def delete(self, plugin_id: str) -> bool: ...


# ── Database backend ──────────────────────────────────────────────────────────


def _record_to_state(record: PluginStateRecord) -> PluginState:
    return PluginState(
        plugin_id=record.plugin_id,
        enabled=bool(record.enabled),
        custom_public_path=record.custom_public_path,
        settings=record.settings,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class DatabaseStateBackend:
    """Plugin state in the `plugin_states` table."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    def _session(self) -> AsyncSession:
        factory = self._session_factory or database.AsyncSessionLocal
        return factory()

    async def get(self, plugin_id: str) -> Optional[PluginState]:
        try:
            async with self._session() as db:
                result = await db.execute(select(PluginStateRecord).where(PluginStateRecord.plugin_id == plugin_id))
                record = result.scalar_one_or_none()
                return _record_to_state(record) if record else None
        except SQLAlchemyError as exc:
            raise StateStoreUnavailableError(str(exc), operation="get") from exc

    async def list(self) -> list[PluginState]:
        try:
            async with self._session() as db:
                result = await db.execute(select(PluginStateRecord).order_by(PluginStateRecord.id))
                return [_record_to_state(r) for r in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise StateStoreUnavailableError(str(exc), operation="list") from exc

    async def upsert(self, plugin_id: str, values: dict[str, Any]) -> PluginState:
        try:
            async with self._session() as db:
                try:
                    record = await self._upsert(db, plugin_id, values)
                except IntegrityError:
                    # Another writer created the row between our select and insert
                    await db.rollback()
                    record = await self._upsert(db, plugin_id, values)
                return _record_to_state(record)
        except SQLAlchemyError as exc:
            raise StateStoreUnavailableError(str(exc), operation="upsert") from exc

    @staticmethod
    async def _upsert(db: AsyncSession, plugin_id: str, values: dict[str, Any]) -> PluginStateRecord:
        result = await db.execute(select(PluginStateRecord).where(PluginStateRecord.plugin_id == plugin_id))
        record = result.scalar_one_or_none()
        if record is None:
            record = PluginStateRecord(plugin_id=plugin_id, enabled=False, custom_public_path=None, settings=None)
            db.add(record)
        for key, value in values.items():
            setattr(record, key, value)
        await db.commit()
        await db.refresh(record)
        return record

    async def delete(self, plugin_id: str) -> bool:
        try:
            async with self._session() as db:
                result = await db.execute(select(PluginStateRecord).where(PluginStateRecord.plugin_id == plugin_id))
                record = result.scalar_one_or_none()
                if record is None:
                    return False
                await db.delete(record)
                await db.commit()
                return True
        except SQLAlchemyError as exc:
            raise StateStoreUnavailableError(str(exc), operation="delete") from exc


# ── JSON file backend ─────────────────────────────────────────────────────────


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


class JsonFileStateBackend:
    """
    Plugin state in a JSON document keyed by plugin id.

    A missing file reads as no state. A corrupt file is logged and read as no
    state; the next write replaces it.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse plugin state file %s: %s", self.path, exc)
            return {}
        except OSError as exc:
            raise StateStoreUnavailableError(str(exc), operation="read") from exc
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise StateStoreUnavailableError(str(exc), operation="write") from exc

    @staticmethod
    def _to_state(plugin_id: str, entry: dict[str, Any]) -> PluginState:
        return PluginState(
            plugin_id=plugin_id,
            enabled=bool(entry.get("enabled", False)),
            custom_public_path=entry.get("custom_public_path"),
            settings=entry.get("settings"),
            created_at=_parse_timestamp(entry.get("created_at")),
            updated_at=_parse_timestamp(entry.get("updated_at")),
        )

    async def get(self, plugin_id: str) -> Optional[PluginState]:
        entry = self._read().get(plugin_id)
        return self._to_state(plugin_id, entry) if entry is not None else None

    async def list(self) -> list[PluginState]:
        return [self._to_state(pid, entry) for pid, entry in self._read().items()]

    async def upsert(self, plugin_id: str, values: dict[str, Any]) -> PluginState:
        data = self._read()
        now = datetime.now(timezone.utc).isoformat()
        entry = copy.deepcopy(data.get(plugin_id)) or {
            "enabled": False,
            "custom_public_path": None,
            "settings": None,
            "created_at": now,
        }
        entry.update({k: v for k, v in values.items() if k in _STATE_FIELDS})
        entry["updated_at"] = now
        data[plugin_id] = entry
        self._write(data)
        return self._to_state(plugin_id, entry)

    async def delete(self, plugin_id: str) -> bool:
        data = self._read()
        if plugin_id not in data:
            return False
        del data[plugin_id]
        self._write(data)
        return True


# ── Store ─────────────────────────────────────────────────────────────────────


class PluginStateStore:
    """Plugin enable/disable state management over a backend."""

    def __init__(self, registry: PluginRegistry, backend: PluginStateBackend):
        self.registry = registry
        self.backend = backend

    # ── Reads (unavailability reads as "no state") ───────────────────────────

    async def get_state(self, plugin_id: str) -> Optional[PluginState]:
        try:
            return await self.backend.get(plugin_id)
        except StateStoreUnavailableError as exc:
            logger.warning("Error getting plugin state for %s: %s", plugin_id, exc.message)
            return None

    async def get_all_states(self) -> list[PluginState]:
        try:
            return await self.backend.list()
        except StateStoreUnavailableError as exc:
            logger.warning("Error getting all plugin states: %s", exc.message)
            return []

    # ── Writes ───────────────────────────────────────────────────────────────

    async def enable(self, plugin_id: str, custom_public_path: Optional[str] = None) -> PluginState:
        """Enable a registered plugin, then run its on_enable hook."""
        definition = self.registry.get(plugin_id)
        if definition is None:
            raise PluginNotRegisteredError(plugin_id)

        state = await self.backend.upsert(
            plugin_id,
            {
                "enabled": True,
                "custom_public_path": custom_public_path or definition.default_public_path or None,
            },
        )
        logger.info("Plugin enabled: %s", plugin_id)
        await self._run_hook(definition, "on_enable")
        return state

    async def disable(self, plugin_id: str) -> PluginState:
        """Disable a plugin; works for ids whose code is not loaded."""
        state = await self.backend.upsert(plugin_id, {"enabled": False})
        logger.info("Plugin disabled: %s", plugin_id)
        definition = self.registry.get(plugin_id)
        if definition is not None:
            await self._run_hook(definition, "on_disable")
        return state

    async def update_settings(self, plugin_id: str, settings: dict[str, Any]) -> PluginState:
        state = await self.backend.upsert(plugin_id, {"settings": json.dumps(settings)})
        logger.info("Plugin settings updated: %s", plugin_id)
        return state

    async def update_public_path(self, plugin_id: str, custom_public_path: str) -> PluginState:
        """Change the public path override. The state record must already exist."""
        if await self.backend.get(plugin_id) is None:
            raise PluginStateNotFoundError(plugin_id)
        state = await self.backend.upsert(plugin_id, {"custom_public_path": custom_public_path})
        logger.info("Plugin public path updated: %s -> %s", plugin_id, custom_public_path)
        return state

    async def delete_state(self, plugin_id: str) -> bool:
        return await self.backend.delete(plugin_id)

    @staticmethod
    async def _run_hook(definition: PluginDefinition, hook_name: str) -> None:
        hook = getattr(definition, hook_name)
        if hook is None:
            return
        try:
            await hook()
        except Exception:
            logger.exception("Error in %s hook for plugin %s", hook_name, definition.id)

    # ── Derived views ────────────────────────────────────────────────────────

    async def get_all_plugins(self) -> list[PluginInstance]:
        """Every registered plugin combined with its state (or defaults)."""
        states = {s.plugin_id: s for s in await self.get_all_states()}
        return [PluginInstance.from_state(d, states.get(d.id)) for d in self.registry.all_plugins()]

    async def get_enabled_plugins(self) -> list[PluginInstance]:
        """Enabled plugins with a registered definition, in registry order."""
        return [p for p in await self.get_all_plugins() if p.enabled]

    async def is_enabled(self, plugin_id: str) -> bool:
        state = await self.get_state(plugin_id)
        return bool(state and state.enabled)

    async def get_public_path(self, plugin_id: str) -> Optional[str]:
        state = await self.get_state(plugin_id)
        if state and state.custom_public_path:
            return state.custom_public_path
        definition = self.registry.get(plugin_id)
        return definition.default_public_path if definition else None
