"""Property tests for configuration merging, lookup and validation."""

import json
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

from stocksmooth.utils.config_manager import PIPELINE_CONFIG, PIPELINE_SCHEMA, ConfigManager

CONFIG_DIR = Path(__file__).parents[2] / "config"

keys = st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=8)
json_values = st.recursive(
    st.text(max_size=8) | st.integers() | st.floats(allow_nan=False) | st.booleans(),
    lambda children: st.lists(children, max_size=3) | st.dictionaries(keys, children, max_size=3),
    max_leaves=10,
)


@pytest.fixture(scope="module")
def manager():
    return ConfigManager(config_dir=str(CONFIG_DIR))


@pytest.fixture(scope="module")
def base_config(manager):
    return manager.load_config(PIPELINE_CONFIG)


@given(st.dictionaries(keys, json_values), st.lists(keys, min_size=1, max_size=4), json_values)
@settings(max_examples=50)
def test_set_then_get(manager, config, path_keys, value):
    """Property: a value written with set_value is read back by get_value."""
    config = json.loads(json.dumps(config))
    path = ".".join(path_keys)
    manager.set_value(config, path, value)
    assert json.dumps(manager.get_value(config, path), sort_keys=True) == json.dumps(value, sort_keys=True)


@given(st.dictionaries(keys, json_values), st.dictionaries(keys, json_values))
@settings(max_examples=50)
def test_merge_override_wins(manager, base, override):
    """Property: non-dict override values replace base values; all keys survive."""
    merged = manager.merge_configs(base, override)
    for k in base:
        assert k in merged
    for k in override:
        if not (isinstance(base.get(k), dict) and isinstance(override[k], dict)):
            assert merged[k] == override[k]


@given(
    st.floats(min_value=1e-6, max_value=1e6),
    st.floats(min_value=1e-6, max_value=1e6),
    st.floats(min_value=1e-3, max_value=1.0),
    st.integers(min_value=1, max_value=500),
)
@settings(max_examples=30)
def test_positive_parameters_validate(manager, base_config, dv, dw, frac, window):
    """Property: any in-range filter parameters pass schema validation."""
    override = {
        "filters": {
            "kalman": {"observation_variance": dv, "transition_variance": dw},
            "lowess": {"frac": frac},
            "sma": {"window": window},
        }
    }
    manager.validate_config(manager.merge_configs(base_config, override), PIPELINE_SCHEMA)


@given(st.integers(max_value=0))
@settings(max_examples=20)
def test_non_positive_window_rejected(manager, base_config, window):
    """Property: windows below one never validate."""
    config = manager.merge_configs(base_config, {"filters": {"ema": {"window": window}}})
    with pytest.raises(ValueError, match="filters -> ema -> window"):
        manager.validate_config(config, PIPELINE_SCHEMA)
