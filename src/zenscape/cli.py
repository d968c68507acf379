"""
Command-line interface for the zen transformation.
"""

import argparse
import logging
import sys
from pathlib import Path

from zenscape.core.composer import ComposerConfig
from zenscape.errors import EncodeError, InvalidInputError
from zenscape.pipeline import ZenPipeline


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="zenscape",
        description="Turn a voice recording into an ambient zen composition",
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Input audio file (wav, mp3, flac, webm)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file path (default: <input>_zen.<ext>)",
    )

    parser.add_argument(
        "--format",
        choices=["mp3", "wav", "numpy"],
        default="mp3",
        help="Output format (default: mp3)",
    )

    parser.add_argument(
        "-s", "--sample-rate",
        type=int,
        default=None,
        help="Resample input to this rate (default: keep original)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the piano and shimmer layers (default: random)",
    )

    parser.add_argument(
        "--rain",
        action="store_true",
        help="Add the raindrop noise layer",
    )

    parser.add_argument(
        "--hard-limit",
        action="store_true",
        help="Clip output to [-1, 1] after shaping",
    )

    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Render the two channels in parallel threads",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    # Validate input
    if not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return 1

    output_path = args.output
    if output_path is None:
        output_path = ZenPipeline.default_output_path(args.input, args.format)

    config = ComposerConfig(
        hard_limit=args.hard_limit,
        include_rain=args.rain,
        parallel_channels=args.parallel,
    )
    pipeline = ZenPipeline(
        sample_rate=args.sample_rate,
        config=config,
        seed=args.seed,
    )

    if not args.quiet:
        print(f"Processing: {args.input}")

    try:
        result = pipeline.process(
            args.input,
            output_path=output_path,
            format=args.format,
        )
    except InvalidInputError as e:
        print(f"Error: Invalid input: {e}", file=sys.stderr)
        return 1
    except EncodeError as e:
        print(f"Error: Encode failed: {e}", file=sys.stderr)
        return 2

    if not args.quiet:
        print(f"Duration: {result['duration']:.2f}s")
        print(f"Sample rate: {result['sample_rate']} Hz")
        print(f"Windows: {result['n_windows']}")
        print(f"Peak: {result['peak']:.3f}")
        print(f"Output: {result['output_path']}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
