"""Thin CLI entry point — builds a Manifest and calls the engine."""

import argparse
import logging
import sys
from pathlib import Path

from autoscrub.engine import process
from autoscrub.ffutil import ExternalToolError
from autoscrub.manifest import ConfigurationError, Manifest, ScrubConfig, load_manifest


def _build_manifest(args: argparse.Namespace) -> Manifest:
    if args.manifest:
        return load_manifest(args.manifest)
    return Manifest(
        input=args.video,
        output=args.output,
        scrub=ScrubConfig(
            min_duration=args.silence_duration,
            margin=args.delay,
            speed=args.speed,
            threshold_db=args.target_threshold,
            target_lufs=args.target_lufs,
            normalize=not args.no_normalize,
        ),
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="autoscrub",
        description="autoscrub — fast-forward silences and normalize loudness with an ffmpeg filtergraph.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command")

    mk = sub.add_parser("make-filtergraph", help="Write a .filter-graph file for a video")
    mk.add_argument("video", nargs="?", type=Path, help="Input video file")
    mk.add_argument("--manifest", "-m", type=Path, help="Path to a JSON manifest file")
    mk.add_argument("--output", "-o", type=Path, help="Filtergraph output path")
    mk.add_argument("--delay", type=float, default=0.25, help="Seconds kept at normal speed at each edge of a silence")
    mk.add_argument("--silence-duration", type=float, default=2.0, help="Minimum silence duration (seconds)")
    mk.add_argument("--speed", type=float, default=8.0, help="Factor to fast-forward silences by")
    mk.add_argument("--target-threshold", type=float, default=-18.0, help="Silence threshold in dB, relative to the target loudness")
    mk.add_argument("--target-lufs", type=float, default=-18.0, help="Target integrated loudness in dB")
    mk.add_argument("--no-normalize", action="store_true", help="Skip loudness measurement and normalization")

    serve = sub.add_parser("serve", help="Launch the filtergraph web API")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from autoscrub.web import create_app
        app = create_app()
        print(f"autoscrub API: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    if not args.manifest and not args.video:
        print("Error: provide either a VIDEO argument or --manifest.", file=sys.stderr)
        sys.exit(1)

    def on_progress(stage: str, frac: float) -> None:
        print(f"  [{frac:3.0%}] {stage}")

    try:
        m = _build_manifest(args)
        result = process(m, on_progress=on_progress)
    except (ConfigurationError, ExternalToolError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print()
    print(f"Done! Filtergraph: {result.output_path}")
    print(f"  Silences sped up: {result.silences_sped_up} of {result.silences_detected}")
    if result.gain_db:
        print(f"  Gain: {result.gain_db:+.2f} dB")
    print(f"  Usage: ffmpeg -i {m.input} -filter_complex_script {result.output_path} -map [v] -map [a] ...")


if __name__ == "__main__":
    main()
