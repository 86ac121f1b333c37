"""Shared utilities for the ``cfkit`` package."""

from .logs import logger, get_logger, set_module_name, change_logger_level, mute_httpx_logger
from .proxy import ProxyObject
