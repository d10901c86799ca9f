"""
Tests for peal/qc: metrics, thresholds and splice-step checks on edits.
Run from project root: python -m pytest tests/test_qc.py -v
Or: python tests/test_qc.py
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import math

import torch
from peal.core.types import SoundParameters
from peal.edit.regions import extract_time_region, paste_region_into_original, target_window
from peal.qc import QC_THRESHOLDS, analyze, max_step, splice_steps
from peal.qc.thresholds import DEFAULT_THRESHOLDS, thresholds_for
from peal.synth import Synthesizer

SR = 44100


def test_clean_tone_has_no_failures():
    buf = Synthesizer(SR).render(SoundParameters(), "tone")
    result = analyze(buf, SR, "tone")
    assert result["failures"] == []
    assert result["status"] != "FAIL"
    m = result["metrics"]
    assert m["clipped_samples"] == 0
    assert m["max_step"] < DEFAULT_THRESHOLDS["max_step_max"]
    assert m["tail_peak"] < 0.01
    assert abs(m["peak_dbfs"] - 20.0 * math.log10(m["peak_linear"])) < 1e-6


def test_full_scale_buffer_fails():
    result = analyze(torch.ones(1000), SR, "tone")
    assert result["status"] == "FAIL"
    assert result["metrics"]["clipped_samples"] == 1000


def test_step_is_a_warning():
    buf = torch.zeros(1000)
    buf[500:] = 0.9
    result = analyze(buf, SR, "tone")
    assert result["status"] == "WARN"
    assert any(w.startswith("Step discontinuity") for w in result["warnings"])
    # The same jump is within the looser pulse limit
    pulse = analyze(buf, SR, "pulse")
    assert not any(w.startswith("Step discontinuity") for w in pulse["warnings"])


def test_silence_is_json_safe():
    result = analyze(torch.zeros(1000), SR, "tone")
    assert result["status"] == "PASS"
    assert result["metrics"]["peak_dbfs"] == -120.0
    assert result["metrics"]["rms_dbfs"] == -120.0


def test_empty_buffer_fails():
    result = analyze(torch.zeros(0), SR, "tone")
    assert result["status"] == "FAIL"
    assert result["failures"] == ["Empty buffer"]


def test_thresholds_merge_over_defaults():
    assert thresholds_for("mix")["max_step_max"] == 1.0
    assert thresholds_for("mix")["tail_peak_max"] == DEFAULT_THRESHOLDS["tail_peak_max"]
    assert thresholds_for("unknown") == DEFAULT_THRESHOLDS
    assert set(QC_THRESHOLDS) >= {"tone", "click", "chime", "sweep", "pulse"}


def test_max_step_and_splice_steps():
    x = torch.tensor([0.0, 0.0, 1.0, 1.0, 1.0])
    assert max_step(x) == 1.0
    assert max_step(torch.zeros(1)) == 0.0
    assert splice_steps(x, [2, 4], radius=1) == [1.0, 0.0]


def test_paste_splices_are_smooth():
    synth = Synthesizer(SR)
    original = synth.render(SoundParameters(frequency=440.0, volume=1.0), "tone")
    edited = synth.render(SoundParameters(frequency=660.0, volume=1.0), "tone")
    region = extract_time_region(edited, 0.3, 0.6, 0.5, SR)
    composite = paste_region_into_original(original, region, 0.3, 0.6)

    start, end = target_window(composite.shape[-1], 0.3, 0.6)
    steps = splice_steps(composite, [start, end])
    assert max(steps) < 0.1
    assert analyze(composite, SR, "mix")["failures"] == []


if __name__ == "__main__":
    test_clean_tone_has_no_failures()
    test_full_scale_buffer_fails()
    test_step_is_a_warning()
    test_silence_is_json_safe()
    test_empty_buffer_fails()
    test_thresholds_merge_over_defaults()
    test_max_step_and_splice_steps()
    test_paste_splices_are_smooth()
    print("All QC tests passed.")
