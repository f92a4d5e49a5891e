#!/usr/bin/env python3
"""
Stream Segmenter - CLI Main Entry Point
CLIアプリケーションのエントリーポイント
"""

import argparse
import sys
from pathlib import Path

from colorama import init as colorama_init

from stream_segmenter.domain import LogLevel

from .controller import CLIController


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """CLI引数を解析する"""
    parser = argparse.ArgumentParser(
        prog="stream-segmenter",
        description="Split an audio file into speech segments with an energy VAD",
    )
    parser.add_argument("file", type=Path, help="Audio file path (wav/flac/ogg)")
    parser.add_argument(
        "--threshold-db",
        type=float,
        default=None,
        metavar="DB",
        help="VAD decision threshold in dBFS",
    )
    parser.add_argument(
        "--smooth-ms",
        type=float,
        default=None,
        metavar="MS",
        help="VAD smoothing time constant in milliseconds",
    )
    parser.add_argument(
        "--hangover-ms",
        type=float,
        default=None,
        metavar="MS",
        help="Silence required before a segment is closed",
    )
    parser.add_argument(
        "--pre-roll-ms",
        type=float,
        default=None,
        metavar="MS",
        help="Audio kept before speech onset",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        metavar="DIR",
        help="Write each segment as a WAV file into DIR",
    )
    parser.add_argument(
        "--json",
        type=Path,
        default=None,
        metavar="PATH",
        help="Save segment metadata as JSON",
    )
    parser.add_argument(
        "--mono",
        action="store_true",
        help="Downmix stereo input to mono",
    )
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Minimum log level",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Also print speech start/end events",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """エントリーポイント"""
    args = parse_args(argv)

    # colorama初期化
    colorama_init(autoreset=True)

    controller = CLIController(
        file_path=args.file,
        overrides={
            "vad": {"threshold_db": args.threshold_db, "smooth_ms": args.smooth_ms},
            "segmenter": {
                "hangover_ms": args.hangover_ms,
                "pre_roll_ms": args.pre_roll_ms,
            },
            "logging": {"level": args.log_level},
        },
        output_dir=args.output_dir,
        json_path=args.json,
        mono=args.mono,
        verbose=args.verbose,
    )
    sys.exit(controller.run())


if __name__ == "__main__":
    main()
