"""Core services for the audiotron daemon."""

from .config import AppConfig, load_config, save_config
from .display_controller import ControllerStatus, DisplayController, open_module

__all__ = [
    "AppConfig",
    "ControllerStatus",
    "DisplayController",
    "load_config",
    "open_module",
    "save_config",
]
