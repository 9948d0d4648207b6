"""
Copyright (c) 2020, the Decred developers
See LICENSE for details

Logging and settings-file helpers.
"""

import configparser
import logging
from logging import Handler, Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import Dict, Iterable, Optional, Union


LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(funcName)s(%(lineno)d) %(message)s"

# Section name injected ahead of sectionless INI files.
DEFAULT_SECTION = "fp61"


class LogSettings:
    """
    Used to track a few logging-related settings.
    """

    root = logging.getLogger("fp61")
    defaultLevel = logging.INFO
    moduleLevels: Dict[str, int] = {}
    loggers: Dict[str, Logger] = {}
    handlers: Dict[str, Handler] = {}


LogSettings.root.setLevel(logging.NOTSET)


def _levelFor(name: str) -> int:
    return LogSettings.moduleLevels.get(name, LogSettings.defaultLevel)


def prepareLogging(
    filepath: Union[Path, str, None] = None,
    logLvl: int = logging.INFO,
    lvlMap: Optional[Dict[str, int]] = None,
) -> None:
    """
    Prepare for using getLogger. Logs to stdout, and to a rotating log file if
    filepath is provided. Handlers are only installed once per destination, so
    calling prepareLogging again only updates the levels. Loggers that already
    exist are re-leveled according to the new logLvl and lvlMap.

    Args:
        filepath: The base name for the rotating log file.
        logLvl: The level for all loggers without an entry in lvlMap.
        lvlMap: Logger name -> level overrides, merged into the stored map.
    """
    LogSettings.defaultLevel = logLvl
    if lvlMap:
        LogSettings.moduleLevels.update(lvlMap)
    for name, logger in LogSettings.loggers.items():
        logger.setLevel(_levelFor(name))

    formatter = logging.Formatter(LOG_FORMAT)
    if filepath:
        key = str(filepath)
        if key not in LogSettings.handlers:
            fileHandler = RotatingFileHandler(
                filepath, mode="a", maxBytes=5 * 1024 * 1024, backupCount=2,
            )
            fileHandler.setFormatter(formatter)
            LogSettings.root.addHandler(fileHandler)
            LogSettings.handlers[key] = fileHandler
    # pythonw on Windows has no usable stdout.
    if "stdout" not in LogSettings.handlers and not sys.executable.endswith(
        "pythonw.exe"
    ):
        printHandler = logging.StreamHandler(sys.stdout)
        printHandler.setFormatter(formatter)
        LogSettings.root.addHandler(printHandler)
        LogSettings.handlers["stdout"] = printHandler


def getLogger(name: str) -> Logger:
    """
    Gets a named logger under the package logger. If the name has a level
    registered with prepareLogging, that level is used, otherwise the default.

    Args:
        name: The logger name.
    """
    logger = LogSettings.root.getChild(name)
    logger.setLevel(_levelFor(name))
    LogSettings.loggers[name] = logger
    return logger


def parseLogLevel(lvl: Union[str, int]) -> int:
    """
    Convert a level name ("debug", "WARNING") or number into a logging level.

    Args:
        lvl: The level name or number.

    Returns:
        The numeric logging level.

    Raises:
        ValueError if the name is not a known level.
    """
    if isinstance(lvl, int):
        return lvl
    lvl = lvl.strip()
    if lvl.isdigit():
        return int(lvl)
    level = logging.getLevelName(lvl.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {lvl!r}")
    return level


def readINI(path: Union[Path, str], keys: Iterable[str]) -> Dict[str, str]:
    """
    Read the specified keys from an INI-formatted file. Sectionless files are
    accepted, and all sections are searched. Keys that are not found are not
    present in the result.

    Args:
        path: The path to the INI file.
        keys: Keys to search for.

    Returns:
        Discovered keys and values.
    """
    keys = set(keys)
    config = configparser.ConfigParser(strict=False)
    with open(path) as f:
        config.read_string(f"[{DEFAULT_SECTION}]\n" + f.read())
    res = {}
    for section in config.sections():
        for k, v in config[section].items():
            if k in keys:
                res[k] = v
    return res
