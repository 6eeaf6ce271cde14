import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, TypeVar

MAX_SAFE_INTEGER = 2**53 - 1

Number = TypeVar("Number", int, float)


@dataclass(frozen=True)
class EngineConfig:
    price_min_index: int = -MAX_SAFE_INTEGER
    price_max_index: int = MAX_SAFE_INTEGER
    bucket_width: int = 8  # px
    left_padding: int = 75  # px
    right_padding: int = 75  # px
    min_zoom_index_spread: int = 10
    zoom_speed_factor: float = 2

    # zooming out may show twice the protocol range so axis labels stay visible
    @property
    def zoom_min_index_limit(self) -> int:
        return self.price_min_index * 2

    @property
    def zoom_max_index_limit(self) -> int:
        return self.price_max_index * 2


def _load_config_from_file(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _get_env_or_default(key: str, fallback: Optional[str]) -> Optional[str]:
    return os.getenv(key, fallback)


def _get_typed_env(key: str, fallback, default: Number, cast: Callable[[Any], Number]) -> Number:
    # environment first, then the config file value, then the built-in default
    for candidate in (os.getenv(key), fallback):
        if candidate is None:
            continue
        try:
            return cast(candidate)
        except (TypeError, ValueError):
            continue
    return default


def parse_tick_index_limits(raw: Optional[str]) -> Tuple[int, int]:
    # zero and non-numeric entries are skipped, so "0,5000" only sets the lower limit
    values: List[int] = []
    for part in (raw or "").split(","):
        try:
            value = int(float(part))
        except (ValueError, OverflowError):
            continue
        if value:
            values.append(value)
    price_min_index = values[0] if len(values) > 0 else -MAX_SAFE_INTEGER
    price_max_index = values[1] if len(values) > 1 else MAX_SAFE_INTEGER
    return price_min_index, price_max_index


_CONFIG_PATH = Path(__file__).with_name("config.json")


def load_config(path: Optional[Path] = None) -> EngineConfig:
    config_data = _load_config_from_file(path or _CONFIG_PATH)
    chart_data = config_data.get("chart", {})
    zoom_data = config_data.get("zoom", {})

    file_limits = config_data.get("max_tick_indexes")
    if isinstance(file_limits, list):
        file_limits = ",".join(str(limit) for limit in file_limits)
    price_min_index, price_max_index = parse_tick_index_limits(
        _get_env_or_default("MAX_TICK_INDEXES", file_limits)
    )

    return EngineConfig(
        price_min_index=price_min_index,
        price_max_index=price_max_index,
        bucket_width=_get_typed_env("BUCKET_WIDTH", chart_data.get("bucket_width"), 8, int),
        left_padding=_get_typed_env(
            "CHART_LEFT_PADDING", chart_data.get("left_padding"), 75, int
        ),
        right_padding=_get_typed_env(
            "CHART_RIGHT_PADDING", chart_data.get("right_padding"), 75, int
        ),
        min_zoom_index_spread=_get_typed_env(
            "MIN_ZOOM_INDEX_SPREAD", zoom_data.get("min_index_spread"), 10, int
        ),
        zoom_speed_factor=_get_typed_env(
            "ZOOM_SPEED_FACTOR", zoom_data.get("speed_factor"), 2, float
        ),
    )


DEFAULT_CONFIG = load_config()
