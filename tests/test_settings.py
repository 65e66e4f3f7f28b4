import logging

import pytest

from beerbot import LEAD_TIME, SettingsError, TuningParameters
from beerbot_settings import load_settings


def test_defaults():
    params = load_settings({})
    assert params == TuningParameters(safety_stock=10, ma_window=4, max_order=0,
                                      policy="pipeline")


def test_overrides():
    params = load_settings({
        "SAFETY_STOCK": "5",
        "MA_WINDOW": "6",
        "MAX_ORDER": "40",
        "POLICY": " Simple ",
    })
    assert params == TuningParameters(5, 6, 40, "simple")


def test_empty_values_use_defaults():
    assert load_settings({"MA_WINDOW": "", "POLICY": ""}) == TuningParameters()


def test_non_integer_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="beerbot_settings"):
        params = load_settings({"MA_WINDOW": "four"})
    assert params.ma_window == 4
    assert "MA_WINDOW='four' is not an integer" in caplog.text


@pytest.mark.parametrize("env", [
    {"MA_WINDOW": "0"},
    {"SAFETY_STOCK": "-1"},
    {"MAX_ORDER": "-5"},
    {"POLICY": "glassbox"},
])
def test_invalid_settings(env):
    with pytest.raises(SettingsError):
        load_settings(env)


def test_settings_error_is_value_error():
    with pytest.raises(ValueError):
        TuningParameters(ma_window=0).validate()


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("SAFETY_STOCK", "12")
    for key in ("MA_WINDOW", "MAX_ORDER", "LEAD_TIME", "POLICY"):
        monkeypatch.delenv(key, raising=False)
    params = load_settings()
    assert params.safety_stock == 12
    assert params.ma_window == 4


def test_lead_time_not_read_from_environment():
    params = load_settings({"LEAD_TIME": "7"})
    assert not hasattr(params, "lead_time")
    assert LEAD_TIME == 2
