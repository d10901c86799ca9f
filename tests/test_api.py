"""
Tests for the HTTP service (peal/main.py) through FastAPI's TestClient.
Run from project root: python -m pytest tests/test_api.py -v
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import base64

from fastapi.testclient import TestClient
from peal.main import app

client = TestClient(app)


def _wav(payload):
    return base64.b64decode(payload["audio"])


# -----------------------------------------------------------------------------
# Service and schema
# -----------------------------------------------------------------------------

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_schema():
    r = client.get("/schema/chime")
    assert r.status_code == 200
    assert "voice.harmonics" in r.json()
    r = client.get("/schema/gong")
    assert r.status_code == 422
    assert r.json()["field"] == "type"


# -----------------------------------------------------------------------------
# Synthesis
# -----------------------------------------------------------------------------

def test_synthesize_returns_wav_and_summary():
    r = client.post("/synthesize/tone", json={"frequency": 440, "duration": 0.5})
    assert r.status_code == 200
    body = r.json()
    assert body["num_samples"] == 22050
    assert len(body["waveform_summary"]) == 100
    assert body["resolved_params"]["frequency"] == 440.0
    wav = _wav(body)
    assert wav[:4] == b"RIFF"
    assert wav[8:12] == b"WAVE"


def test_synthesize_camel_case_body():
    r = client.post("/synthesize/pulse", json={"pulseRate": 12, "effects": {"modulation": True}})
    assert r.status_code == 200
    assert r.json()["resolved_params"]["voice"]["pulse_rate"] == 12.0


def test_synthesize_with_qc():
    r = client.post("/synthesize/chime?qc=true", json={})
    assert r.status_code == 200
    assert r.json()["qc"]["status"] in ("PASS", "WARN", "FAIL")


def test_invalid_parameters_are_422():
    r = client.post("/synthesize/tone", json={"duration": -1})
    assert r.status_code == 422
    assert r.json()["field"] == "duration"
    r = client.post("/synthesize/gong", json={})
    assert r.status_code == 422


def test_non_integer_seed_is_422():
    r = client.post("/synthesize/tone", json={"seed": "abc"})
    assert r.status_code == 422
    assert r.json()["field"] == "seed"


# -----------------------------------------------------------------------------
# Variations and proposals
# -----------------------------------------------------------------------------

def test_variations_parameters_only():
    r = client.post("/variations", json={
        "sound_type": "tone", "parameters": {"duration": 0.5}, "preset": "subtle", "count": 3, "seed": 1,
    })
    assert r.status_code == 200
    variations = r.json()["variations"]
    assert len(variations) == 3
    assert all("audio" not in v for v in variations)
    for v in variations:
        assert 0.475 - 1e-9 <= v["parameters"]["duration"] <= 0.525 + 1e-9


def test_variations_rendered():
    r = client.post("/variations", json={
        "sound_type": "click", "profile": {"frequency_variance": 30}, "count": 2, "seed": 5, "render": True,
    })
    assert r.status_code == 200
    for v in r.json()["variations"]:
        assert _wav(v)[:4] == b"RIFF"


def test_variations_bad_preset():
    r = client.post("/variations", json={"preset": "extreme"})
    assert r.status_code == 422
    assert r.json()["field"] == "preset"


def test_propose():
    r = client.post("/propose", json={"count": 2, "seed": 3, "range": {"enabled_types": ["tone"]}})
    assert r.status_code == 200
    sounds = r.json()["sounds"]
    assert len(sounds) == 2
    assert all(s["type"] == "tone" for s in sounds)


# -----------------------------------------------------------------------------
# Mixdown and region edits
# -----------------------------------------------------------------------------

def test_empty_mix():
    r = client.post("/mix", json={"tracks": []})
    assert r.status_code == 200
    assert r.json()["empty"] is True
    assert r.json()["audio"] is None


def test_mix_two_tracks():
    r = client.post("/mix", json={
        "composition_duration": 1.0,
        "tracks": [
            {"sound_type": "tone", "parameters": {"duration": 0.5}},
            {"sound_type": "chime", "parameters": {"duration": 0.5}, "start_position": 0.5},
        ],
    })
    assert r.status_code == 200
    body = r.json()
    assert body["empty"] is False
    assert body["num_samples"] == 44100


def test_mix_non_integer_seed_is_422():
    r = client.post("/mix", json={"tracks": [{"sound_type": "tone", "seed": "x"}]})
    assert r.status_code == 422
    assert r.json()["field"] == "seed"


def test_region_edit():
    r = client.post("/region/edit", json={
        "sound_type": "tone",
        "original": {"frequency": 440},
        "edited": {"frequency": 880},
        "start_ratio": 0.25,
        "end_ratio": 0.5,
    })
    assert r.status_code == 200
    body = r.json()
    assert body["num_samples"] == 22050
    assert len(body["splice_steps"]) == 2


def test_region_edit_bad_ratio():
    r = client.post("/region/edit", json={"start_ratio": "early"})
    assert r.status_code == 422
    assert r.json()["field"] == "start_ratio"


def test_region_insert():
    r = client.post("/region/insert", json={
        "sound_type": "tone",
        "insert_type": "click",
        "original": {},
        "insert": {},
        "start_ratio": 0.4,
        "end_ratio": 0.6,
    })
    assert r.status_code == 200
    body = r.json()
    assert body["num_samples"] == 22050
    assert body["insert"]["start_position"] == 0.4
    assert body["insert"]["num_samples"] == 2205


# -----------------------------------------------------------------------------
# Vibe prompts
# -----------------------------------------------------------------------------

def test_vibe():
    r = client.post("/vibe", json={"prompt": "two short beeps"})
    assert r.status_code == 200
    body = r.json()
    assert len(body["sounds"]) == 2
    assert body["sounds"][1]["offset"] == 0.15
    assert _wav(body)[:4] == b"RIFF"


def test_vibe_suggestions():
    r = client.get("/vibe/suggestions", params={"q": "click"})
    assert r.status_code == 200
    assert "three quick clicks" in r.json()["suggestions"]
