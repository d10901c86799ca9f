"""
Tests for peal/params: defaults, request normalization, safety clamps and validation.
Run from project root: python -m pytest tests/test_params.py -v
Or: python tests/test_params.py
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from peal.core.errors import InvalidParameterError
from peal.core.params import clamp_if_bounds, get_param, set_param
from peal.core.types import SOUND_TYPES, SoundParameters
from peal.params import DEFAULT_PRESET, PARAM_SCHEMA, build_parameters, clamp_params, resolve_params
from peal.params.engine_params import to_engine_params


# -----------------------------------------------------------------------------
# Defaults and schema
# -----------------------------------------------------------------------------

def test_every_type_has_defaults_and_schema():
    for sound_type in SOUND_TYPES:
        assert sound_type in DEFAULT_PRESET
        assert sound_type in PARAM_SCHEMA
        params = build_parameters(sound_type, {})
        assert isinstance(params, SoundParameters)


def test_type_defaults():
    assert build_parameters("tone", {}) == SoundParameters()
    click = build_parameters("click", {})
    assert (click.frequency, click.duration, click.attack) == (1000.0, 0.05, 0.0)
    assert build_parameters("pulse", {}).voice.pulse_rate == 10.0


def test_schema_defaults_match_presets():
    for sound_type, schema in PARAM_SCHEMA.items():
        for key in ("waveform", "volume", "effects.filter_frequency", "effects.delay_feedback"):
            assert get_param(DEFAULT_PRESET[sound_type], key) == schema[key]["default"], (sound_type, key)


def test_resolve_does_not_mutate_defaults():
    before = get_param(DEFAULT_PRESET["tone"], "effects.delay_time")
    resolve_params("tone", {"effects": {"delay_time": 0.4}})
    assert get_param(DEFAULT_PRESET["tone"], "effects.delay_time") == before


# -----------------------------------------------------------------------------
# Request normalization
# -----------------------------------------------------------------------------

def test_camel_case_aliases():
    params = build_parameters("sweep", {
        "frequency": 300,
        "sweepRange": 3,
        "direction": "down",
        "filterFrequency": 2500,
        "effects": {"filter": True},
    })
    assert params.voice.sweep_range == 3.0
    assert params.voice.direction == "down"
    assert params.effects.filter is True
    assert params.effects.filter_frequency == 2500.0


def test_alias_overrides_nested_value():
    engine = to_engine_params({"effects": {"filter_frequency": 500}, "filterFrequency": 900}, "tone")
    assert get_param(engine, "effects.filter_frequency") == 900


def test_unsupported_and_display_fields_dropped():
    engine = to_engine_params({
        "id": "abc", "type": "tone", "tags": ["x"], "brightness": 0.4,
        "effects": {"modulation": True, "reverb": True},
    }, "tone")
    assert engine == {"effects": {"reverb": True}}


# -----------------------------------------------------------------------------
# Clamps
# -----------------------------------------------------------------------------

def test_runaway_feedback_clamped():
    params = build_parameters("tone", {"effects": {"delay": True, "delay_feedback": 1.5}})
    assert params.effects.delay_feedback == 0.95


def test_filter_cutoff_clamped_below_nyquist():
    params = build_parameters("tone", {"filterFrequency": 30000}, sample_rate=44100)
    assert params.effects.filter_frequency == 22049.0


def test_chime_harmonics_clamped():
    assert build_parameters("chime", {"harmonics": 9}).voice.harmonics == 4
    assert build_parameters("chime", {"harmonics": 1}).voice.harmonics == 2


def test_clamp_params_returns_copy():
    raw = {"effects": {"delay_feedback": 2.0}}
    out = clamp_params("tone", raw)
    assert raw["effects"]["delay_feedback"] == 2.0
    assert out["effects"]["delay_feedback"] == 0.95


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

def test_invalid_values_raise_with_field():
    cases = [
        ({"duration": 0}, "duration"),
        ({"frequency": -10}, "frequency"),
        ({"sustain": 1.5}, "sustain"),
        ({"waveform": "noise"}, "waveform"),
        ({"attack": float("nan")}, "attack"),
        ({"direction": "sideways"}, "voice.direction"),
    ]
    for raw, field in cases:
        with pytest.raises(InvalidParameterError) as info:
            build_parameters("sweep", raw)
        assert info.value.field == field


def test_unknown_type_raises():
    with pytest.raises(InvalidParameterError):
        resolve_params("gong", {})


def test_to_dict_round_trip():
    params = build_parameters("click", {"clickType": "noise", "resonance": 8})
    assert SoundParameters.from_dict(params.to_dict()) == params


# -----------------------------------------------------------------------------
# Dotted-key helpers
# -----------------------------------------------------------------------------

def test_get_and_set_param():
    params = {}
    set_param(params, "effects.delay_time", 0.2)
    assert params == {"effects": {"delay_time": 0.2}}
    assert get_param(params, "effects.delay_time") == 0.2
    assert get_param(params, "effects.missing", 1) == 1
    assert get_param(params, "voice.harmonics", 3) == 3
    assert get_param({"effects": 5}, "effects.delay_time", 0.1) == 0.1


def test_clamp_if_bounds():
    assert clamp_if_bounds(5.0, 0.0, 1.0) == 1.0
    assert clamp_if_bounds(-5.0, 0.0, None) == 0.0
    assert clamp_if_bounds(0.5) == 0.5


if __name__ == "__main__":
    test_every_type_has_defaults_and_schema()
    test_type_defaults()
    test_schema_defaults_match_presets()
    test_resolve_does_not_mutate_defaults()
    test_camel_case_aliases()
    test_alias_overrides_nested_value()
    test_unsupported_and_display_fields_dropped()
    test_runaway_feedback_clamped()
    test_filter_cutoff_clamped_below_nyquist()
    test_chime_harmonics_clamped()
    test_clamp_params_returns_copy()
    test_invalid_values_raise_with_field()
    test_unknown_type_raises()
    test_to_dict_round_trip()
    test_get_and_set_param()
    test_clamp_if_bounds()
    print("All params tests passed.")
