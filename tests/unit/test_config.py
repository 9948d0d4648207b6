"""
Copyright (c) 2020, the Decred developers
See LICENSE for details
"""

import logging

import pytest

from fp61 import Fp61Error, config, field


def writeConf(tmp_path, text):
    path = tmp_path / "fp61.conf"
    path.write_text(text)
    return str(path)


def test_defaults(tmp_path):
    cfg = config.Fp61Config(str(tmp_path / "missing.conf"), environ={})
    assert cfg.multiplier == field.DEFAULT_MULTIPLIER
    assert cfg.logLevel == logging.INFO
    assert cfg.get("nonsense") is None


def test_file(tmp_path):
    path = writeConf(tmp_path, "multiplier = Schoolbook\nloglevel = debug\n")
    cfg = config.Fp61Config(path, environ={})
    assert cfg.multiplier == "schoolbook"
    assert cfg.logLevel == logging.DEBUG

    # Sections are allowed, and unknown keys are ignored.
    path = writeConf(tmp_path, "[fp61]\nmultiplier = karatsuba\ncolor = blue\n")
    cfg = config.Fp61Config(path, environ={})
    assert cfg.multiplier == "karatsuba"
    assert cfg.get("color") is None


def test_environment(tmp_path):
    path = writeConf(tmp_path, "multiplier = schoolbook\n")
    env = {config.ENV_MULTIPLIER: "karatsuba", config.ENV_LOG_LEVEL: "30"}
    cfg = config.Fp61Config(path, environ=env)
    assert cfg.multiplier == "karatsuba"
    assert cfg.logLevel == logging.WARNING


def test_invalid(tmp_path):
    path = writeConf(tmp_path, "multiplier = abacus\n")
    with pytest.raises(Fp61Error):
        config.Fp61Config(path, environ={})
    env = {config.ENV_MULTIPLIER: "native", config.ENV_LOG_LEVEL: "chatty"}
    with pytest.raises(Fp61Error):
        config.Fp61Config(path, environ=env)


def test_set(tmp_path):
    cfg = config.Fp61Config(str(tmp_path / "missing.conf"), environ={})
    cfg.set("multiplier", "karatsuba")
    assert cfg.multiplier == "karatsuba"
    cfg.set("loglevel", "error")
    assert cfg.logLevel == logging.ERROR

    with pytest.raises(Fp61Error):
        cfg.set("multiplier", "abacus")
    assert cfg.multiplier == "karatsuba"
    with pytest.raises(Fp61Error):
        cfg.set("color", "blue")


def test_load(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "fp61Config", None)
    monkeypatch.delenv(config.ENV_MULTIPLIER, raising=False)
    monkeypatch.delenv(config.ENV_LOG_LEVEL, raising=False)
    path = writeConf(tmp_path, "multiplier = schoolbook\n")
    cfg = config.load(path)
    assert cfg.multiplier == "schoolbook"
    assert config.load() is cfg


def test_apply(tmp_path, restoreMultiplier):
    path = writeConf(tmp_path, "multiplier = karatsuba\nloglevel = warning\n")
    cfg = config.Fp61Config(path, environ={})
    config.apply(cfg)
    assert field.getMultiplier() == "karatsuba"
    assert config.log.getEffectiveLevel() == logging.WARNING

    cfg.set("loglevel", "info")
    config.apply(cfg)
    assert config.log.getEffectiveLevel() == logging.INFO
