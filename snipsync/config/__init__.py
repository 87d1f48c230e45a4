"""
User settings stored as TOML.
"""

from snipsync.config.settings import Settings, load_settings, save_settings

__all__ = ["Settings", "load_settings", "save_settings"]
