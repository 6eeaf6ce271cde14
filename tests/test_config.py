import json

import pytest

from tickdepth.config import MAX_SAFE_INTEGER, EngineConfig, load_config, parse_tick_index_limits

ENV_KEYS = [
    "MAX_TICK_INDEXES",
    "BUCKET_WIDTH",
    "CHART_LEFT_PADDING",
    "CHART_RIGHT_PADDING",
    "MIN_ZOOM_INDEX_SPREAD",
    "ZOOM_SPEED_FACTOR",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def _write_config(tmp_path, data: dict):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_parse_tick_index_limits():
    assert parse_tick_index_limits("-887272,887272") == (-887272, 887272)
    assert parse_tick_index_limits("") == (-MAX_SAFE_INTEGER, MAX_SAFE_INTEGER)
    assert parse_tick_index_limits(None) == (-MAX_SAFE_INTEGER, MAX_SAFE_INTEGER)


def test_parse_tick_index_limits_skips_zero_and_junk():
    assert parse_tick_index_limits("0,5000") == (5000, MAX_SAFE_INTEGER)
    assert parse_tick_index_limits("abc,-100,100") == (-100, 100)


def test_missing_file_gives_defaults(clean_env, tmp_path):
    assert load_config(tmp_path / "missing.json") == EngineConfig()


def test_load_config_from_file(clean_env, tmp_path):
    path = _write_config(
        tmp_path,
        {
            "max_tick_indexes": [-500, 500],
            "chart": {"bucket_width": 4, "left_padding": 10},
            "zoom": {"min_index_spread": 20, "speed_factor": 1.5},
        },
    )

    config = load_config(path)

    assert (config.price_min_index, config.price_max_index) == (-500, 500)
    assert config.bucket_width == 4
    assert config.left_padding == 10
    assert config.right_padding == 75
    assert config.min_zoom_index_spread == 20
    assert config.zoom_speed_factor == 1.5


def test_environment_overrides_file(clean_env, tmp_path):
    path = _write_config(tmp_path, {"max_tick_indexes": "-500,500", "chart": {"bucket_width": 4}})
    clean_env.setenv("MAX_TICK_INDEXES", "-10,10")
    clean_env.setenv("BUCKET_WIDTH", "12")

    config = load_config(path)

    assert (config.price_min_index, config.price_max_index) == (-10, 10)
    assert config.bucket_width == 12


def test_malformed_environment_values_fall_back(clean_env, tmp_path):
    path = _write_config(tmp_path, {"chart": {"bucket_width": 4}})
    clean_env.setenv("BUCKET_WIDTH", "wide")
    clean_env.setenv("ZOOM_SPEED_FACTOR", "fast")

    config = load_config(path)

    assert config.bucket_width == 4
    assert config.zoom_speed_factor == 2


def test_zoom_limits_are_twice_the_price_limits():
    config = EngineConfig(price_min_index=-100, price_max_index=300)
    assert config.zoom_min_index_limit == -200
    assert config.zoom_max_index_limit == 600


def test_numeric_values_are_cast_per_field(clean_env, tmp_path):
    path = _write_config(tmp_path, {"chart": {"bucket_width": "6"}, "zoom": {"speed_factor": "3"}})
    clean_env.setenv("CHART_LEFT_PADDING", "1.5")

    config = load_config(path)

    assert config.bucket_width == 6
    assert config.zoom_speed_factor == 3.0
    assert isinstance(config.zoom_speed_factor, float)
    assert config.left_padding == 75
