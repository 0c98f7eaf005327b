"""CLI entry point."""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

from .analyzer import analyze_folder
from .config import Config, load_config
from .filename_parsers import PARSER_TYPES
from .logging_utils import setup_logging
from .overview import TreeOverviewAggregator
from .renderer import render_folder_summary, render_overview
from .rows import RowBuilder
from .summary import FolderAggregator, SummaryAccumulator
from .transcriber import TranscriptionUnavailable, transcribe_audio, transcribe_folder


def _add_common(cmd: argparse.ArgumentParser, folder: bool = True) -> None:
    if folder:
        cmd.add_argument("folder", nargs="?", help="Root folder of recordings.")
    cmd.add_argument("--config", default="callreport_config.yml", help="Config.")
    cmd.add_argument("--log-dir", help="Directory for callreport.log.")
    cmd.add_argument(
        "--parser",
        choices=sorted(PARSER_TYPES),
        help="Force one filename parser for every file.",
    )
    cmd.add_argument("--verbose", action="store_true", help="Log to the console too.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="callreport")
    sub = parser.add_subparsers(dest="command")

    transcribe_cmd = sub.add_parser("transcribe", help="Transcribe recordings.")
    _add_common(transcribe_cmd)
    transcribe_cmd.add_argument("--model", help="Whisper model.")
    transcribe_cmd.add_argument("--language", help="Language code.")

    analyze_cmd = sub.add_parser("analyze", help="Analyse transcripts.")
    _add_common(analyze_cmd)

    summary_cmd = sub.add_parser("summary", help="Write summary.csv per folder.")
    _add_common(summary_cmd)

    overview_cmd = sub.add_parser("overview", help="Merge summaries into an overview.")
    _add_common(overview_cmd)

    process_cmd = sub.add_parser("process", help="Summary followed by overview.")
    _add_common(process_cmd)
    process_cmd.add_argument("--transcribe", action="store_true", help="Transcribe first.")
    process_cmd.add_argument("--analyze", action="store_true", help="Analyse first.")
    process_cmd.add_argument("--model", help="Whisper model.")
    process_cmd.add_argument("--language", help="Language code.")

    parsers_cmd = sub.add_parser("parsers", help="List filename parsers in order.")
    _add_common(parsers_cmd, folder=False)

    parse_cmd = sub.add_parser("parse", help="Show metadata parsed from a filename.")
    parse_cmd.add_argument("filename", help="Recording filename.")
    _add_common(parse_cmd, folder=False)
    return parser


def _load(args: argparse.Namespace) -> Config:
    if os.path.exists(args.config):
        return load_config(args.config)
    return Config()


def _run_transcribe(args: argparse.Namespace, cfg: Config, folder: str) -> None:
    model = args.model or cfg.transcription.model
    language = args.language or cfg.transcription.language

    def _transcribe(path: str):
        return transcribe_audio(
            path,
            model_name=model,
            language=language,
            device=cfg.transcription.device,
            compute_type=cfg.transcription.compute_type,
        )

    stats = transcribe_folder(folder, _transcribe, cfg.extensions)
    print(
        f"Transcription: {stats.processed} processed, {stats.skipped} skipped, "
        f"{stats.failed} failed, {stats.directories} subdirectories"
    )


def _run_analyze(cfg: Config, folder: str) -> None:
    stats = analyze_folder(folder, cfg.extensions)
    print(
        f"Analysis: {stats.processed} processed, {stats.skipped} skipped, "
        f"{stats.failed} failed"
    )


def _run_summary(args: argparse.Namespace, cfg: Config, folder: str) -> None:
    registry = cfg.build_registry(args.parser)
    aggregator = FolderAggregator(RowBuilder(registry), cfg.extensions)
    accumulator = SummaryAccumulator()
    aggregator.aggregate(folder, accumulator)
    for result in accumulator.folders:
        if result.rows:
            print(render_folder_summary(result))
    print(f"Summary: {len(accumulator.rows)} recordings in {len(accumulator.folders)} folders")


def _run_overview(args: argparse.Namespace, cfg: Config, folder: str) -> None:
    registry = cfg.build_registry(args.parser)
    report = TreeOverviewAggregator(registry, cfg.extensions).aggregate(folder)
    print(render_overview(report))


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        cfg = _load(args)
        setup_logging(
            args.log_dir or cfg.logging.log_dir,
            level=cfg.logging.level,
            console=cfg.logging.console or args.verbose,
        )

        if args.command == "parsers":
            registry = cfg.build_registry(args.parser)
            if registry.override is not None:
                print(f"override: {registry.override.name}")
            for idx, name in enumerate(registry.names(), start=1):
                print(f"{idx}. {name}")
            return 0

        if args.command == "parse":
            metadata = cfg.build_registry(args.parser).resolve(args.filename)
            print(f"Timestamp: {metadata.timestamp}")
            print(f"Phone number: {metadata.phone_number}")
            print(f"Call type: {metadata.call_type}")
            return 0

        folder = args.folder or cfg.base_dir
        if not folder or not os.path.isdir(folder):
            print(f"Error: folder does not exist: {folder or '(none)'}")
            return 1

        if args.command == "transcribe":
            _run_transcribe(args, cfg, folder)
        elif args.command == "analyze":
            _run_analyze(cfg, folder)
        elif args.command == "summary":
            _run_summary(args, cfg, folder)
        elif args.command == "overview":
            _run_overview(args, cfg, folder)
        elif args.command == "process":
            if args.transcribe:
                _run_transcribe(args, cfg, folder)
            if args.analyze:
                _run_analyze(cfg, folder)
            _run_summary(args, cfg, folder)
            _run_overview(args, cfg, folder)
    except (OSError, ValueError, TranscriptionUnavailable) as exc:
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
