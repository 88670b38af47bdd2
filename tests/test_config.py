from __future__ import annotations

import logging

import pytest

from sim_layout_pv import config


def test_log_level_accepts_names_and_numbers(monkeypatch):
    """Ensure SIM_LAYOUT_PV_LOG_LEVEL is parsed by name or number."""
    monkeypatch.setenv("SIM_LAYOUT_PV_LOG_LEVEL", "debug")
    assert config.get_log_level() == logging.DEBUG

    monkeypatch.setenv("SIM_LAYOUT_PV_LOG_LEVEL", "30")
    assert config.get_log_level() == 30

    monkeypatch.delenv("SIM_LAYOUT_PV_LOG_LEVEL")
    assert config.get_log_level() == logging.INFO


def test_log_level_rejects_unknown_names(monkeypatch):
    monkeypatch.setenv("SIM_LAYOUT_PV_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError):
        config.get_log_level()


def test_default_seed_from_environment(monkeypatch):
    """Ensure the seed is optional and validated."""
    monkeypatch.delenv("SIM_LAYOUT_PV_SEED", raising=False)
    assert config.get_default_seed() is None

    monkeypatch.setenv("SIM_LAYOUT_PV_SEED", "42")
    assert config.get_default_seed() == 42

    monkeypatch.setenv("SIM_LAYOUT_PV_SEED", "forty-two")
    with pytest.raises(ValueError):
        config.get_default_seed()


def test_reference_year_defaults(monkeypatch):
    monkeypatch.delenv("SIM_LAYOUT_PV_REFERENCE_YEAR", raising=False)
    assert config.get_reference_year() == config.DEFAULT_REFERENCE_YEAR

    monkeypatch.setenv("SIM_LAYOUT_PV_REFERENCE_YEAR", "2030")
    assert config.get_reference_year() == 2030


def test_load_dotenv_does_not_override_existing_values(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("# comment\nSIM_LAYOUT_PV_SEED=7\nSIM_LAYOUT_PV_REFERENCE_YEAR='2031'\n", encoding="utf-8")
    monkeypatch.setenv("SIM_LAYOUT_PV_SEED", "1")
    # Registered first so the value loaded from the file is undone afterwards.
    monkeypatch.setenv("SIM_LAYOUT_PV_REFERENCE_YEAR", "2024")
    monkeypatch.delenv("SIM_LAYOUT_PV_REFERENCE_YEAR")

    parsed = config._load_dotenv(str(env_file))

    assert parsed == {"SIM_LAYOUT_PV_SEED": "7", "SIM_LAYOUT_PV_REFERENCE_YEAR": "2031"}
    assert config.get_default_seed() == 1
    assert config.get_reference_year() == 2031


def test_configure_logging_installs_one_handler():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        config.configure_logging(logging.WARNING)
        config.configure_logging(logging.INFO)
        ours = [h for h in root.handlers if getattr(h, "_sim_layout_pv", False)]
        assert len(ours) == 1
        assert root.level == logging.INFO
    finally:
        root.setLevel(level)
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
