"""
Utility functions and helpers.

warning_manager imports Qt and is imported directly by the UI.
"""
from .config import AppConfig, load_config, save_config
from .logging_setup import configure_logging
from .app_dirs import get_app_data_dir, get_config_dir

__all__ = [
    'AppConfig',
    'load_config',
    'save_config',
    'configure_logging',
    'get_app_data_dir',
    'get_config_dir',
]
