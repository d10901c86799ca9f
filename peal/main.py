from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import logging

from peal.core.config import SAMPLE_RATE
from peal.core.errors import InvalidParameterError
from peal.core.io import AudioIO
from peal.core.types import GenerationRange, Track, VarianceProfile
from peal.dsp.mixer import mix_tracks
from peal.dsp.postchain import PostChain
from peal.edit.regions import extract_time_region, insert_region, paste_region_into_original, target_window
from peal.params.resolve import build_parameters
from peal.params.schema import PARAM_SCHEMA
from peal.params.vibe import VibeParser, render_vibe
from peal.qc import analyze, splice_steps
from peal.synth import Synthesizer
from peal.variation import generate_batch, get_preset, propose_batch

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("peal")

app = FastAPI(
    title="Peal Engine",
    version="1.0.0",
    description="Procedural UI Sound Engine"
)

# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

synth = Synthesizer(sample_rate=SAMPLE_RATE)


@app.exception_handler(InvalidParameterError)
async def invalid_parameter_handler(request: Request, exc: InvalidParameterError):
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "field": exc.field, "reason": exc.reason},
    )


def _encode(buffer):
    """Response payload for one rendered buffer."""
    return {
        "audio": AudioIO.to_base64(buffer, SAMPLE_RATE),
        "waveform_summary": PostChain.waveform_summary(buffer),
        "num_samples": int(buffer.shape[-1]),
        "sample_rate": SAMPLE_RATE,
    }


def _render(sound_type: str, params: dict, seed: int = 0):
    parameters = build_parameters(sound_type, params or {})
    return parameters, synth.render(parameters, sound_type, seed=seed)


def _ratios(body: dict):
    ratios = []
    for name, default in (("start_ratio", 0.0), ("end_ratio", 1.0)):
        value = body.get(name, default)
        try:
            ratios.append(float(value))
        except (TypeError, ValueError):
            raise InvalidParameterError(name, value, "not a number")
    return tuple(ratios)


def _seed(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidParameterError("seed", value, "not an integer")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "peal-engine", "sample_rate": SAMPLE_RATE}


@app.get("/schema/{sound_type}")
async def schema(sound_type: str):
    if sound_type not in PARAM_SCHEMA:
        raise InvalidParameterError("type", sound_type, f"must be one of {', '.join(PARAM_SCHEMA)}")
    return PARAM_SCHEMA[sound_type]


@app.post("/synthesize/{sound_type}")
async def synthesize(sound_type: str, params: dict, qc: bool = False):
    """
    Renders one sound.
    Returns JSON with base64-encoded audio, waveform summary and resolved_params.
    """
    params_copy = params.copy()
    seed = _seed(params_copy.pop("seed", 0))

    parameters, audio = _render(sound_type, params_copy, seed)
    result = _encode(audio)
    result["resolved_params"] = parameters.to_dict()
    if qc:
        result["qc"] = analyze(audio, SAMPLE_RATE, sound_type)
    return result


@app.post("/variations")
async def variations(body: dict):
    """
    Body: { sound_type, parameters, profile | preset, count, seed, render }
    Returns the varied parameter sets, rendered when `render` is true.
    """
    sound_type = body.get("sound_type", "tone")
    seed_params = build_parameters(sound_type, body.get("parameters") or {})
    if body.get("preset"):
        profile = get_preset(body["preset"])
    else:
        profile = VarianceProfile.from_dict(body.get("profile") or {})

    batch = generate_batch(seed_params, profile, body.get("count", 10), sound_type, rng=body.get("seed"))
    results = [{"parameters": p.to_dict()} for p in batch]
    if body.get("render", False):
        buffers = synth.render_batch(batch, sound_type)
        for entry, buffer in zip(results, buffers):
            entry.update(_encode(buffer))
    return {"sound_type": sound_type, "variations": results}


@app.post("/propose")
async def propose(body: dict):
    """
    Body: { range: GenerationRange fields, count, seed }
    Random sounds from the generation range, rendered.
    """
    generation_range = GenerationRange.from_dict(body.get("range") or {})
    proposals = propose_batch(generation_range, body.get("count", 8), rng=body.get("seed"))

    results = []
    for i, (sound_type, parameters) in enumerate(proposals):
        entry = {"type": sound_type, "parameters": parameters.to_dict()}
        entry.update(_encode(synth.render(parameters, sound_type, seed=i)))
        results.append(entry)
    return {"sounds": results}


@app.post("/mix")
async def mix(body: dict):
    """
    Body: { composition_duration, tracks: [{ sound_type, parameters, start_position,
    volume, muted, solo, name }] }
    Returns the mixdown, or audio null when no track is playable.
    """
    tracks = []
    for i, entry in enumerate(body.get("tracks") or []):
        sound_type = entry.get("sound_type", "tone")
        _, audio = _render(sound_type, entry.get("parameters"), _seed(entry.get("seed", i)))
        tracks.append(Track(
            buffer=audio,
            name=entry.get("name", f"Track {i + 1}"),
            start_position=entry.get("start_position", 0.0),
            end_position=entry.get("end_position", 1.0),
            muted=bool(entry.get("muted", False)),
            solo=bool(entry.get("solo", False)),
            volume=entry.get("volume", 1.0),
        ))

    composition = body.get("composition_duration")
    if composition is None:
        composition = max((t.buffer.shape[-1] / SAMPLE_RATE for t in tracks), default=0.0)

    mixed = mix_tracks(tracks, composition, SAMPLE_RATE)
    if mixed is None:
        return {"empty": True, "audio": None, "waveform_summary": None}
    result = _encode(mixed)
    result["empty"] = False
    return result


@app.post("/region/edit")
async def region_edit(body: dict):
    """
    Edit mode: render `edited` parameters in full, then graft the selected
    window of it onto the rendered `original`.
    Body: { sound_type, original, edited, start_ratio, end_ratio }
    """
    sound_type = body.get("sound_type", "tone")
    start_ratio, end_ratio = _ratios(body)
    original_params, original = _render(sound_type, body.get("original"))
    _, candidate = _render(sound_type, body.get("edited"))

    region = extract_time_region(candidate, start_ratio, end_ratio, original_params.duration, SAMPLE_RATE)
    composite = paste_region_into_original(original, region, start_ratio, end_ratio)

    start, end = target_window(composite.shape[-1], start_ratio, end_ratio)
    result = _encode(composite)
    result["splice_steps"] = splice_steps(composite, [start, min(start + region.shape[-1], end)])
    return result


@app.post("/region/insert")
async def region_insert(body: dict):
    """
    Layer a new sound inside the selected window.
    Body: { sound_type, original, insert_type, insert, start_ratio, end_ratio }
    Returns the composite plus the insert on its own, ready to become a track.
    """
    sound_type = body.get("sound_type", "tone")
    insert_type = body.get("insert_type", sound_type)
    start_ratio, end_ratio = _ratios(body)
    _, original = _render(sound_type, body.get("original"))
    _, inserted = _render(insert_type, body.get("insert"))

    composite = insert_region(original, inserted, start_ratio, end_ratio)
    result = _encode(composite)
    result["insert"] = _encode(inserted)
    result["insert"]["start_position"] = start_ratio
    return result


@app.post("/vibe")
async def vibe(body: dict):
    """
    Body: { prompt }
    Renders the prompt's sounds and their mixdown.
    """
    prompt = body.get("prompt", "")
    rendered = render_vibe(prompt, synth)
    result = _encode(rendered.buffer)
    result["duration"] = rendered.duration
    result["sounds"] = [
        {
            "word": e.word,
            "type": e.sound_type,
            "offset": e.offset,
            "parameters": e.parameters.to_dict(),
        }
        for e in rendered.events
    ]
    return result


@app.get("/vibe/suggestions")
async def vibe_suggestions(q: str = ""):
    return {"suggestions": VibeParser.suggestions(q)}


if __name__ == "__main__":
    uvicorn.run("peal.main:app", host="0.0.0.0", port=8000, reload=True)
