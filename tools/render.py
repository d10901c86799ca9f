#!/usr/bin/env python3
"""
Developer renderer with debug outputs, fingerprinting and QC.

Usage:
    python tools/render.py <subcommand> [options]

Subcommands:
    one-shot <type> [params_json]     Render a single sound
    vibe "<prompt>"                   Render a vibe prompt mixdown
    variations <type> [params_json]   Render a batch of variations of one sound
    propose                           Render random proposals from the default range
    param-sweep                       Render param pairs to catch no-op parameters

Options:
    --seed <int>         Fixed seed (default: random)
    --debug              Save resolved.json next to each WAV
    --qc                 Run QC analysis
    --output-dir <path>  Output directory (default: unique timestamped dir)
"""
import sys
import os
import json
import argparse
import hashlib
import random
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import torch

from peal.core.config import SAMPLE_RATE
from peal.core.io import AudioIO
from peal.core.types import SOUND_TYPES, GenerationRange
from peal.params.resolve import build_parameters
from peal.params.schema import DEFAULT_PRESET
from peal.params.vibe import render_vibe
from peal.qc.qc import analyze
from peal.synth import Synthesizer
from peal.variation import PRESETS, generate_batch, get_preset, propose_batch


def _get_git_hash() -> str:
    """Get short git commit hash."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            cwd=os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except OSError:
        pass
    return "unknown"


def get_unique_output_dir(base_name: str) -> Path:
    """renders/{base_name}/YYYYMMDD_HHMMSS_{gitshort}/"""
    now = datetime.now()
    git_hash = _get_git_hash()
    short_hash = git_hash[:8] if git_hash != "unknown" else "unknown"
    return Path("renders") / base_name / f"{now.strftime('%Y%m%d')}_{now.strftime('%H%M%S')}_{short_hash}"


def fingerprint(audio: torch.Tensor) -> Dict:
    """SHA256 of the samples plus peak and RMS."""
    audio_1d = audio.reshape(-1).float()
    return {
        "sha256": hashlib.sha256(audio_1d.numpy().tobytes()).hexdigest(),
        "peak": float(torch.max(torch.abs(audio_1d))) if audio_1d.numel() else 0.0,
        "rms": float(torch.sqrt(torch.mean(audio_1d ** 2) + 1e-12)) if audio_1d.numel() else 0.0,
    }


def write_render(
    audio: torch.Tensor,
    output_dir: Path,
    filename: str,
    kind: str,
    resolved: Optional[dict] = None,
    seed: Optional[int] = None,
    debug: bool = False,
    qc: bool = False,
) -> Dict:
    """Save WAV (+ resolved.json when debug) and print a one-line summary."""
    output_dir.mkdir(parents=True, exist_ok=True)
    wav_path = output_dir / f"{filename}.wav"
    AudioIO.save_wav(audio, str(wav_path), SAMPLE_RATE)

    info = {
        "kind": kind,
        "timestamp": datetime.now().isoformat(),
        "git_hash": _get_git_hash(),
        "seed": seed,
        "resolved_params": resolved,
        "fingerprint": fingerprint(audio),
        "qc_result": analyze(audio, SAMPLE_RATE, kind) if qc else None,
        "wav_path": str(wav_path),
    }
    if debug:
        with open(output_dir / f"{filename}.resolved.json", "w") as f:
            json.dump(info, f, indent=2, default=str)

    fp = info["fingerprint"]
    print(f"  {wav_path}  peak={fp['peak']:.4f} rms={fp['rms']:.4f} sha={fp['sha256'][:8]}")
    if info["qc_result"]:
        _print_qc(info["qc_result"])
    return info


def _print_qc(result: Dict) -> None:
    print(f"  QC Status: {result['status']}")
    for f in result["failures"]:
        print(f"    FAIL: {f}")
    for w in result["warnings"]:
        print(f"    WARN: {w}")


def _load_params(path: Optional[str]) -> dict:
    if not path:
        return {}
    with open(path, "r") as f:
        return json.load(f)


def _seed(args) -> int:
    return args.seed if args.seed is not None else random.randint(0, 2**31 - 1)


def cmd_one_shot(args):
    params = build_parameters(args.type, _load_params(args.params_json))
    seed = _seed(args)
    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("one_shot")
    audio = Synthesizer().render(params, args.type, seed=seed)
    write_render(audio, output_dir, args.filename or f"{args.type}_oneshot", args.type,
                 resolved=params.to_dict(), seed=seed, debug=args.debug, qc=args.qc)
    return 0


def cmd_vibe(args):
    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("vibe")
    rendered = render_vibe(args.prompt)
    print(f"Prompt: {args.prompt!r} -> {len(rendered.events)} sounds, {rendered.duration:.3f}s")
    for e in rendered.events:
        print(f"  {e.offset:6.3f}s  {e.word:<8} {e.sound_type:<6} {e.parameters.frequency:7.1f} Hz")
    resolved = [
        {"offset": e.offset, "type": e.sound_type, "parameters": e.parameters.to_dict()}
        for e in rendered.events
    ]
    write_render(rendered.buffer, output_dir, "vibe_mix", "mix", resolved=resolved,
                 debug=args.debug, qc=args.qc)
    return 0


def cmd_variations(args):
    seed_params = build_parameters(args.type, _load_params(args.params_json))
    seed = _seed(args)
    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("variations")
    batch = generate_batch(seed_params, get_preset(args.preset), args.count, args.type, rng=seed)
    buffers = Synthesizer().render_batch(batch, args.type, seed=seed)

    print(f"Rendering {len(batch)} '{args.preset}' variations to {output_dir}")
    for i, (params, audio) in enumerate(zip(batch, buffers)):
        write_render(audio, output_dir, f"{args.type}_var_{i:02d}", args.type,
                     resolved=params.to_dict(), seed=seed + i, debug=args.debug, qc=args.qc)
    return 0


def cmd_propose(args):
    seed = _seed(args)
    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("propose")
    synth = Synthesizer()
    print(f"Rendering {args.count} proposals to {output_dir}")
    for i, (sound_type, params) in enumerate(propose_batch(GenerationRange(), args.count, rng=seed)):
        audio = synth.render(params, sound_type, seed=seed + i)
        write_render(audio, output_dir, f"{i:02d}_{sound_type}", sound_type,
                     resolved=params.to_dict(), seed=seed + i, debug=args.debug, qc=args.qc)
    return 0


# (type, dotted key, value A, value B): each pair must render differently
SWEEP_CASES = [
    ("tone", "waveform", "sine", "square"),
    ("tone", "release", 0.05, 0.3),
    ("tone", "effects.filter", False, True),
    ("tone", "effects.delay", False, True),
    ("tone", "effects.reverb", False, True),
    ("click", "voice.click_type", "tonal", "noise"),
    ("chime", "voice.harmonics", 2, 4),
    ("sweep", "voice.direction", "up", "down"),
    ("pulse", "voice.pulse_width", 0.2, 0.8),
]


def cmd_param_sweep(args):
    synth = Synthesizer()
    failures = []
    for sound_type, key, a, b in SWEEP_CASES:
        hashes = []
        for value in (a, b):
            params = json.loads(json.dumps(DEFAULT_PRESET[sound_type]))
            target = params
            parts = key.split(".")
            for part in parts[:-1]:
                target = target[part]
            target[parts[-1]] = value
            audio = synth.render(build_parameters(sound_type, params), sound_type, seed=42)
            hashes.append(fingerprint(audio)["sha256"])
        if hashes[0] == hashes[1]:
            failures.append(f"{sound_type} {key}: {a!r} vs {b!r} renders identical")
            print(f"  FAIL: {sound_type} {key}")
        else:
            print(f"  PASS: {sound_type} {key} ({hashes[0][:8]} vs {hashes[1][:8]})")

    if failures:
        print(f"\nFAILURES ({len(failures)}):")
        for f in failures:
            print(f"  - {f}")
        return 1
    print("\nAll param changes produce different outputs.")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Peal developer renderer")
    subparsers = parser.add_subparsers(dest="command", help="Subcommand")

    def add_common_args(p):
        p.add_argument("--seed", type=int, default=None, help="Fixed seed (default: random)")
        p.add_argument("--debug", action="store_true", help="Save resolved.json with params")
        p.add_argument("--qc", action="store_true", help="Run QC analysis")
        p.add_argument("--output-dir", type=str, help="Output directory (default: unique timestamped)")

    p_one = subparsers.add_parser("one-shot", help="Render a single sound")
    p_one.add_argument("type", choices=SOUND_TYPES)
    p_one.add_argument("params_json", nargs="?", help="JSON file with params (optional)")
    p_one.add_argument("--filename", type=str, help="Output filename (without extension)")
    add_common_args(p_one)

    p_vibe = subparsers.add_parser("vibe", help="Render a vibe prompt")
    p_vibe.add_argument("prompt")
    add_common_args(p_vibe)

    p_var = subparsers.add_parser("variations", help="Render variations of one sound")
    p_var.add_argument("type", choices=SOUND_TYPES)
    p_var.add_argument("params_json", nargs="?", help="JSON file with params (optional)")
    p_var.add_argument("--count", type=int, default=10)
    p_var.add_argument("--preset", choices=list(PRESETS), default="moderate")
    add_common_args(p_var)

    p_prop = subparsers.add_parser("propose", help="Render random proposals")
    p_prop.add_argument("--count", type=int, default=8)
    add_common_args(p_prop)

    p_sweep = subparsers.add_parser("param-sweep", help="Catch no-op parameters")
    add_common_args(p_sweep)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "one-shot": cmd_one_shot,
        "vibe": cmd_vibe,
        "variations": cmd_variations,
        "propose": cmd_propose,
        "param-sweep": cmd_param_sweep,
    }
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
