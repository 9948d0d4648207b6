"""
Copyright (c) 2020, the Decred developers
See LICENSE for details

Configuration settings for Fp61.

Settings are read from an INI file (sections optional) in the per-user
configuration directory, then overridden by environment variables.
"""

import logging
import os

from appdirs import AppDirs

from fp61 import Fp61Error
from fp61 import field
from fp61.util import helpers


_ad = AppDirs("Fp61", False)
CONFIG_DIR = _ad.user_config_dir

# The configuration file name.
CONFIG_NAME = "fp61.conf"
CONFIG_PATH = os.path.join(CONFIG_DIR, CONFIG_NAME)

# Environment variables that take precedence over the file.
ENV_MULTIPLIER = "FP61_MULTIPLIER"
ENV_LOG_LEVEL = "FP61_LOG_LEVEL"

ENV_KEYS = {
    "multiplier": ENV_MULTIPLIER,
    "loglevel": ENV_LOG_LEVEL,
}

DefaultConfig = {
    "multiplier": field.DEFAULT_MULTIPLIER,
    "loglevel": "INFO",
}

log = helpers.getLogger("CONFIG")


class Fp61Config:
    """
    Fp61Config is the configuration settings.
    """

    def __init__(self, path=None, environ=None):
        """
        Args:
            path (str): Optional path to the configuration file. Defaults to
                CONFIG_PATH. A missing file is not an error.
            environ (dict): Optional environment mapping. Defaults to
                os.environ.
        """
        self.path = path if path else CONFIG_PATH
        environ = os.environ if environ is None else environ
        self.file = dict(DefaultConfig)
        if os.path.isfile(self.path):
            self.file.update(helpers.readINI(self.path, DefaultConfig.keys()))
            log.debug(f"loaded configuration from {self.path}")
        for k, envKey in ENV_KEYS.items():
            if envKey in environ:
                self.file[k] = environ[envKey]
        self.normalize()

    def normalize(self):
        """
        Check the values, converting them to their canonical forms.

        Raises:
            Fp61Error: A value is not valid.
        """
        multiplier = str(self.file["multiplier"]).strip().lower()
        if multiplier not in field.MULTIPLIERS:
            raise Fp61Error(
                f"unknown multiplier {multiplier!r}, "
                f"expected one of {sorted(field.MULTIPLIERS)}"
            )
        self.file["multiplier"] = multiplier
        try:
            self.file["loglevel"] = helpers.parseLogLevel(self.file["loglevel"])
        except ValueError as e:
            raise Fp61Error(str(e))

    def set(self, k, v):
        """
        Set the configuration option. The value is validated immediately.

        Args:
            k (str): The setting key.
            v (str or int): The value.
        """
        if k not in DefaultConfig:
            raise Fp61Error(f"unknown setting {k!r}")
        old = self.file[k]
        self.file[k] = v
        try:
            self.normalize()
        except Fp61Error:
            self.file[k] = old
            raise

    def get(self, k):
        """
        Retrieve the setting.

        Args:
            k (str): The setting key.

        Returns:
            str or int: The value, or None if k is not a setting.
        """
        return self.file.get(k)

    @property
    def multiplier(self):
        return self.file["multiplier"]

    @property
    def logLevel(self):
        return self.file["loglevel"]


fp61Config = None


def load(path=None):
    """
    Load and return the current configuration.

    The configuration is only loaded once. Successive calls to the modular
    `load` function will return the same instance.

    Args:
        path (str): Optional path to the configuration file.

    Returns:
        Fp61Config: The configuration.
    """
    global fp61Config
    if not fp61Config:
        fp61Config = Fp61Config(path)
    return fp61Config


def apply(cfg=None):
    """
    Put the configuration into effect: select the multiplier and set the log
    level of the package loggers.

    Args:
        cfg (Fp61Config): Optional configuration. Defaults to load().
    """
    cfg = cfg if cfg else load()
    helpers.prepareLogging(logLvl=cfg.logLevel)
    field.setMultiplier(cfg.multiplier)
    log.info(
        f"multiplier {cfg.multiplier}, "
        f"log level {logging.getLevelName(cfg.logLevel)}"
    )
