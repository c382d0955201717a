"""
Plugin State Model

One row per plugin id holding the enabled flag, the public path override and
an opaque settings blob. Rows may outlive the plugin code that created them.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from cms.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PluginStateRecord(Base):
    __tablename__ = "plugin_states"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    plugin_id = Column(String(100), unique=True, nullable=False, index=True)
    enabled = Column(Boolean, nullable=False, default=False)
    custom_public_path = Column(String(255), nullable=True)
    # JSON string, not interpreted by the plugin core
    settings = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<PluginStateRecord(plugin_id={self.plugin_id!r}, enabled={self.enabled})>"
