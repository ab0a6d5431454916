"""
Command-line interface for the timestamp splitter
"""
import argparse
import logging
import os
import sys

from . import audio_utils, pipeline
from .config import Config, find_default_config
from .core import format_clock, format_seconds
from .core.validation import format_issues, validate_against_duration
from .services.errors import PipelineError, ValidationFailedError


def read_timestamp_text(path):
    """Read timestamp lines from a file, or from stdin when ``path`` is '-'."""
    if path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def print_dry_run(segments, issues):
    """Print resolved intervals and issues without writing anything."""
    print("\n" + "=" * 60)
    print("Dry-run: resolved segments")
    print("=" * 60)
    if not segments:
        print("No segments found.")
    for seg in segments:
        print(f"\n{seg.ordinal}. {seg.title}")
        print(f"- Start:    {format_clock(seg.start_seconds)} ({format_seconds(seg.start_seconds)})")
        print(f"- End:      {format_clock(seg.end_seconds)} ({format_seconds(seg.end_seconds)})")
        print(f"- Duration: {format_seconds(seg.duration)}")
    if issues:
        print("\nIssues:")
        print(format_issues(issues))


def print_progress(fraction):
    print(f"Progress: {fraction * 100:.0f}%")


def build_parser():
    parser = argparse.ArgumentParser(
        description='Split an audio file into one file per timestamped segment')
    parser.add_argument('--input', '-i', required=True, help='Source audio file (mp3, m4a, aac, ogg, wav)')
    parser.add_argument('--timestamps', '-t', required=True,
                        help="Text file with one segment per line ('-' reads stdin)")
    parser.add_argument('--config', type=str, help='Path to the YAML configuration file')
    parser.add_argument('--output-dir', type=str, help='Output directory for the segment files')
    zip_group = parser.add_mutually_exclusive_group()
    zip_group.add_argument('--zip', dest='archive', action='store_true', help='Pack all segments into one zip archive')
    zip_group.add_argument('--no-zip', dest='archive', action='store_false', help='Write each segment as its own file')
    parser.set_defaults(archive=None)
    parser.add_argument('--archive-name', type=str, help='File name of the zip archive')
    parser.add_argument('--no-tags', dest='embed_tags', action='store_false', default=None,
                        help='Do not embed metadata tags in lossy outputs')
    parser.add_argument('--dry-run', action='store_true', help='Print the resolved segments and exit')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None):
    """CLI entry point; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = Config(config_file=args.config or find_default_config())
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 2
    config.update_from_args({
        'output_dir': args.output_dir,
        'archive': args.archive,
        'archive_name': args.archive_name,
        'embed_tags': args.embed_tags,
    })

    try:
        text = read_timestamp_text(args.timestamps)
    except OSError as e:
        print(f"Cannot read timestamps: {e}")
        return 2

    if args.dry_run:
        duration = audio_utils.probe_duration(args.input) if os.path.exists(args.input) else 0
        segments, issues = pipeline.parse_timestamps(text, duration)
        if duration:
            issues.extend(validate_against_duration(segments, duration))
        print_dry_run(segments, issues)
        return 1 if issues else 0

    if not os.path.exists(args.input):
        print(f"Input file not found: {args.input}")
        return 2

    try:
        outputs, paths = pipeline.run(args.input, text, config, on_progress=print_progress)
    except ValidationFailedError as e:
        print("Timestamps are not valid, nothing was exported:")
        print(format_issues(e.issues))
        return 1
    except PipelineError as e:
        print(f"Split failed: {e}")
        return 1

    print(f"\n{'=' * 60}")
    print(f"Created {len(outputs)} segment(s) in '{config.get('output_dir')}'")
    for path in paths:
        print(f"✓ {path}")
    print(f"{'=' * 60}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
