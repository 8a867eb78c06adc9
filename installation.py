"""
Entry point for the gesture-driven particle installation.

Usage examples:
    python installation.py                    # camera + hand tracking, preview window
    python installation.py --mode scene       # particle scene only, no camera
    python installation.py --seed 7 --frames 600 --no-preview
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
PY_DIR = ROOT / "python"
if str(PY_DIR) not in sys.path:
    sys.path.insert(0, str(PY_DIR))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Gesture-driven particle installation")
    parser.add_argument(
        "--mode",
        choices=("live", "scene"),
        default="live",
        help="'live' drives the scene from the camera, 'scene' runs the particles without gestures.",
    )
    parser.add_argument(
        "--config",
        default=str(PY_DIR / "config.json"),
        help="Path to the JSON config (defaults to python/config.json).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the particle layout.")
    parser.add_argument("--frames", type=int, default=None, help="Stop after this many frames.")
    parser.add_argument("--no-preview", action="store_true", help="Do not open the camera preview window.")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    from main_loop import main as run_main_loop

    run_main_loop(
        config_path=args.config,
        mode=args.mode,
        seed=args.seed,
        max_frames=args.frames,
        show_preview=False if args.no_preview else None,
    )


if __name__ == "__main__":
    main()
