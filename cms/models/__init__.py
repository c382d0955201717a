from cms.models.plugin_state import PluginStateRecord

__all__ = ["PluginStateRecord"]
