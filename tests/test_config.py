import os
import tempfile

import pytest

from callreport.config import Config, load_config, save_config


def test_save_and_load_config_roundtrip():
    cfg = Config(base_dir="/data/calls")
    cfg.filename_parsers = ["pattern", "token"]
    cfg.filename_parser_override = "prefix"
    cfg.prefix = "Rec "
    cfg.transcription.model = "medium"

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "callreport_config.yml")
        save_config(path, cfg)
        loaded = load_config(path)

    assert loaded.base_dir == "/data/calls"
    assert loaded.filename_parsers == ["pattern", "token"]
    assert loaded.filename_parser_override == "prefix"
    assert loaded.prefix == "Rec "
    assert loaded.transcription.model == "medium"
    assert loaded.extensions == cfg.extensions


def test_partial_config_uses_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "cfg.yml")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("extensions: ['.MP3']\nlogging:\n  level: DEBUG\n")
        loaded = load_config(path)
    assert loaded.extensions == [".mp3"]
    assert loaded.logging.level == "DEBUG"
    assert loaded.build_registry().names() == ["token", "pattern", "prefix"]


def test_null_sections_fall_back_to_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "cfg.yml")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("transcription:\nlogging:\nextensions:\nfilename_parsers:\nbase_dir:\n")
        loaded = load_config(path)
    defaults = Config()
    assert loaded.transcription == defaults.transcription
    assert loaded.logging == defaults.logging
    assert loaded.extensions == defaults.extensions
    assert loaded.filename_parsers == defaults.filename_parsers
    assert loaded.base_dir == ""


def test_build_registry_override_and_unknown_name():
    cfg = Config()
    assert cfg.build_registry("pattern").override.name == "pattern"
    cfg.filename_parsers = ["token", "bogus"]
    with pytest.raises(ValueError):
        cfg.build_registry()


def test_setup_logging_follows_log_dir():
    from callreport.logging_utils import setup_logging

    with tempfile.TemporaryDirectory() as first, tempfile.TemporaryDirectory() as second:
        logger, path_one = setup_logging(first)
        logger.info("one")
        logger, path_two = setup_logging(second)
        logger.info("two")
        for handler in logger.handlers:
            handler.flush()
        assert os.path.exists(path_one)
        with open(path_two, "r", encoding="utf-8") as handle:
            assert "two" in handle.read()
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
