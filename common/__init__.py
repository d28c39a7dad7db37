"""Common utilities for mtui clients."""
from .config import get_config, load_config, configure_logger, get_password

__all__ = ['get_config', 'load_config', 'configure_logger', 'get_password']
