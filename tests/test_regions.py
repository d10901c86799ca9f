"""
Tests for peal/edit/regions: extract, paste and insert on rendered buffers.
Run from project root: python -m pytest tests/test_regions.py -v
Or: python tests/test_regions.py
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
import torch
from peal.core.errors import InvalidParameterError
from peal.core.types import SoundParameters
from peal.edit.regions import (
    clamp_ratios,
    extract_time_region,
    insert_region,
    paste_region_into_original,
    widen_window,
)
from peal.synth import Synthesizer

SR = 44100


def _tone(duration=0.5):
    return Synthesizer(SR).render(SoundParameters(duration=duration), "tone")


def _max_step(x):
    return float(torch.max(torch.abs(x[1:] - x[:-1])))


# -----------------------------------------------------------------------------
# Window math
# -----------------------------------------------------------------------------

def test_clamp_ratios():
    assert clamp_ratios(-0.5, 2.0) == (0.0, 1.0)
    assert clamp_ratios(0.8, 0.2) == (0.8, 0.8)
    assert clamp_ratios(float("nan"), 0.5) == (0.0, 0.5)


def test_widen_window_centers_and_stays_in_bounds():
    assert widen_window(11025, 11025, 22050) == (10897, 11153)
    assert widen_window(0, 0, 22050) == (0, 256)
    assert widen_window(22050, 22050, 22050) == (21794, 22050)
    assert widen_window(100, 5000, 22050) == (100, 5000)
    assert widen_window(0, 0, 100) == (0, 100)


# -----------------------------------------------------------------------------
# Extract
# -----------------------------------------------------------------------------

def test_extract_full_range_is_identity():
    buf = _tone()
    region = extract_time_region(buf, 0.0, 1.0, 0.5, SR)
    assert torch.equal(region, buf)
    assert region.data_ptr() != buf.data_ptr()


def test_extract_maps_ratios_through_reference_duration():
    """Selection made on a 0.5 s sound, taken from a 1.0 s re-render: first half."""
    longer = _tone(duration=1.0)
    region = extract_time_region(longer, 0.0, 1.0, 0.5, SR)
    assert torch.equal(region, longer[:22050])


def test_extract_collapsed_window_widens_to_minimum():
    buf = _tone()
    region = extract_time_region(buf, 0.5, 0.5, 0.5, SR)
    assert region.shape == (256,)
    assert torch.equal(region, buf[10897:11153])


def test_extract_window_at_end():
    buf = _tone()
    region = extract_time_region(buf, 1.0, 1.0, 0.5, SR)
    assert torch.equal(region, buf[-256:])


def test_extract_inverted_and_out_of_range_ratios():
    buf = _tone()
    inverted = extract_time_region(buf, 0.8, 0.2, 0.5, SR)
    assert torch.equal(inverted, buf[17512:17768])
    wide = extract_time_region(buf, -1.0, 3.0, 0.5, SR)
    assert torch.equal(wide, buf)


def test_extract_short_source_is_padded():
    source = torch.linspace(-0.5, 0.5, 100)
    region = extract_time_region(source, 0.2, 0.4, 100 / SR, SR)
    assert region.shape == (256,)
    assert torch.equal(region[:100], source)
    assert torch.count_nonzero(region[100:]) == 0


def test_extract_bad_reference_duration_raises():
    buf = _tone()
    for bad in (0.0, -1.0, float("nan"), float("inf")):
        with pytest.raises(InvalidParameterError):
            extract_time_region(buf, 0.0, 1.0, bad, SR)


def test_extract_non_tensor_raises():
    with pytest.raises(InvalidParameterError):
        extract_time_region([0.0] * 1000, 0.0, 1.0, 0.5, SR)


# -----------------------------------------------------------------------------
# Paste
# -----------------------------------------------------------------------------

def test_paste_crossfades_without_jumps():
    original = torch.full((10000,), 0.5)
    extracted = torch.full((10000,), -0.5)
    out = paste_region_into_original(original, extracted, 0.2, 0.6)

    assert out.shape == original.shape
    # 1% of 4000 samples = 40-sample fades, so each step is 1/40 of the 1.0 gap
    assert _max_step(out) <= 0.025 + 1e-6
    assert abs(float(out[4000]) + 0.5) < 1e-6
    torch.testing.assert_close(out[:2000], original[:2000])
    torch.testing.assert_close(out[6000:], original[6000:])
    assert torch.all(original == 0.5)


def test_paste_shorter_extract_only_touches_its_length():
    original = torch.full((10000,), 0.5)
    extracted = torch.full((500,), -0.5)
    out = paste_region_into_original(original, extracted, 0.2, 0.6)
    torch.testing.assert_close(out[2500:], original[2500:])
    assert float(out[2250]) < 0.0


def test_paste_of_own_region_is_identity():
    buf = _tone()
    region = extract_time_region(buf, 0.25, 0.75, 0.5, SR)
    out = paste_region_into_original(buf, region, 0.25, 0.75)
    torch.testing.assert_close(out, buf)


def test_paste_collapsed_window_touches_minimum_span():
    """start == end widens to 256 samples centred on the start."""
    original = torch.full((10000,), 0.5)
    extracted = torch.full((10000,), -0.5)
    out = paste_region_into_original(original, extracted, 0.5, 0.5)

    # [4872, 5128); 1% of 256 -> 2-sample fades
    torch.testing.assert_close(out[:4873], original[:4873])
    torch.testing.assert_close(out[5128:], original[5128:])
    assert float(out[4873]) < 0.5 and float(out[5127]) < 0.5
    assert torch.all(out[4874:5127] == -0.5)


# -----------------------------------------------------------------------------
# Insert
# -----------------------------------------------------------------------------

def test_insert_layers_and_leaves_outside_untouched():
    original = torch.full((10000,), 0.4)
    insert = torch.full((10000,), 0.4)
    out = insert_region(original, insert, 0.2, 0.6)
    # insert + half the original in the body of the region
    assert abs(float(out[4000]) - 0.6) < 1e-6
    torch.testing.assert_close(out[:2000], original[:2000])
    torch.testing.assert_close(out[6000:], original[6000:])


def test_insert_clamps_region():
    original = torch.full((10000,), 0.8)
    insert = torch.full((10000,), 0.8)
    out = insert_region(original, insert, 0.0, 1.0)
    assert float(torch.max(out)) <= 1.0
    assert float(out[5000]) == 1.0


def test_insert_edges_ramp_in():
    original = torch.zeros(10000)
    insert = torch.ones(10000)
    out = insert_region(original, insert, 0.2, 0.6)
    # 5% of 4000 = 200-sample ramps
    assert float(out[2000]) == 0.0
    assert abs(float(out[2100]) - 0.5) < 1e-6
    assert float(out[3000]) == 1.0
    assert _max_step(out) <= 1.0 / 200 + 1e-6


def test_insert_inverted_window_touches_minimum_span():
    """end < start collapses onto start, then widens to 256 samples around it."""
    original = torch.full((10000,), 0.4)
    insert = torch.full((10000,), 0.4)
    out = insert_region(original, insert, 0.8, 0.2)

    # [7872, 8128); 5% of 256 -> 12-sample ramps
    torch.testing.assert_close(out[:7873], original[:7873])
    torch.testing.assert_close(out[8128:], original[8128:])
    assert float(out[7873]) > 0.4 + 1e-3
    assert float(out[8127]) > 0.4 + 1e-3
    torch.testing.assert_close(out[7884:8117], torch.full((233,), 0.6))


if __name__ == "__main__":
    test_clamp_ratios()
    test_widen_window_centers_and_stays_in_bounds()
    test_extract_full_range_is_identity()
    test_extract_maps_ratios_through_reference_duration()
    test_extract_collapsed_window_widens_to_minimum()
    test_extract_window_at_end()
    test_extract_inverted_and_out_of_range_ratios()
    test_extract_short_source_is_padded()
    test_extract_bad_reference_duration_raises()
    test_extract_non_tensor_raises()
    test_paste_crossfades_without_jumps()
    test_paste_shorter_extract_only_touches_its_length()
    test_paste_of_own_region_is_identity()
    test_paste_collapsed_window_touches_minimum_span()
    test_insert_layers_and_leaves_outside_untouched()
    test_insert_clamps_region()
    test_insert_edges_ramp_in()
    test_insert_inverted_window_touches_minimum_span()
    print("All region tests passed.")
