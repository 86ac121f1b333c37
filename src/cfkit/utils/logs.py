from __future__ import annotations

"""Loguru-backed logging for :mod:`cfkit`.

The package logs through its own loguru ``Core`` so that handlers configured
by the host application on the global ``loguru.logger`` are left alone.
"""

import atexit
import logging
import os
import sys
import threading
import typing as t

from loguru._logger import Core as _Core
from loguru._logger import Logger as _Logger

__all__ = [
    "Logger",
    "logger",
    "get_logger",
    "set_module_name",
    "change_logger_level",
    "mute_httpx_logger",
]

DEFAULT_CLASS_COLOR = '<fg #a8dadc>'
DEFAULT_FUNCTION_COLOR = '<fg #219ebc>'
RESET_COLOR = '\x1b[0m'

_lock = threading.Lock()
_module_name_mapping: t.Dict[str, str] = {}
_module_name_relative: t.Dict[str, bool] = {}
_handler_id: t.Optional[int] = None
_muted_httpx: t.Optional[bool] = None


def _patch_record(record: t.Dict[str, t.Any]) -> None:
    """Attach the registered friendly module name to a record."""
    name = record["name"] or ""
    if name in _module_name_mapping:
        record["extra"]["module_name"] = _module_name_mapping[name]
        return
    # the longest registered package containing ``name`` wins
    parents = [
        module for module, relative in list(_module_name_relative.items())
        if relative and name.startswith(module + '.')
    ]
    if not parents:
        return
    module = max(parents, key = len)
    resolved = _module_name_mapping[module] + name[len(module):]
    _module_name_mapping[name] = resolved
    record["extra"]["module_name"] = resolved


def default_formatter(record: t.Dict[str, t.Any]) -> str:
    """
    Formats ``LEVEL time: module:function: message``
    """
    if record["extra"].get("module_name"):
        extra = DEFAULT_CLASS_COLOR + '{extra[module_name]}</>:' + DEFAULT_FUNCTION_COLOR + '{function}</>: '
    else:
        extra = DEFAULT_CLASS_COLOR + '{name}</>:' + DEFAULT_FUNCTION_COLOR + '{function}</>: '
    return "<level>{level: <8}</> <green>{time:YYYY-MM-DD HH:mm:ss.SSS}</>: " \
        + extra + "<level>{message}</level>" + RESET_COLOR + "\n{exception}"


class Logger(_Logger):
    """
    The package logger with friendly module names
    """

    def set_module_name(self, module: str, name: str, is_relative: bool = False) -> None:
        """Registers a friendly name shown in place of ``module``"""
        set_module_name(module, name, is_relative = is_relative)


def set_module_name(module: str, name: str, is_relative: bool = False) -> None:
    """Registers a friendly name shown in place of ``module``"""
    _module_name_mapping[module] = name
    _module_name_relative[module] = is_relative


def _create_logger(level: t.Union[str, int]) -> Logger:
    global _handler_id
    _logger = Logger(
        core = _Core(),
        exception = None,
        depth = 0,
        record = False,
        lazy = False,
        colors = False,
        raw = False,
        capture = True,
        patchers = [_patch_record],
        extra = {},
    )
    if sys.stderr:
        _handler_id = _logger.add(
            sys.stderr,
            level = level,
            colorize = True,
            backtrace = True,
            format = default_formatter,
        )
    atexit.register(_logger.remove)
    return _logger


def change_logger_level(level: t.Union[str, int]) -> None:
    """Swaps the stderr handler for one at ``level``"""
    global _handler_id
    if isinstance(level, str): level = level.upper()
    with _lock:
        if _handler_id is not None:
            logger.remove(_handler_id)
        _handler_id = logger.add(
            sys.stderr,
            level = level,
            colorize = True,
            backtrace = True,
            format = default_formatter,
        )


def get_logger(level: t.Union[str, int, None] = None) -> Logger:
    """Returns the shared package logger"""
    if level is not None:
        change_logger_level(level)
    return logger


def mute_httpx_logger() -> None:
    """Ensure the upstream ``httpx`` logger only logs warnings or higher once."""
    global _muted_httpx
    if _muted_httpx is not None:
        return
    _muted_httpx = True
    logging.getLogger("httpx").setLevel(logging.WARNING)


logger_level = os.getenv('LOGGER_LEVEL', 'INFO').upper()
logger: Logger = _create_logger(logger_level)
logger.set_module_name('cfkit', 'cfkit', is_relative = True)
