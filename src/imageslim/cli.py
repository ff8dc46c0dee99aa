"""
Command line entry points for ImageSlim.

``imageslim`` compresses an image file; ``imageslim-svd`` prints the
decomposition of a seeded random matrix.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import torch
from torch import Tensor

from .core import (
    DecompositionError,
    ImageSlim,
    ImageSlimError,
    InvalidCompressionLevel,
    decompose,
    validate_level
)
from .core.svd import BACKENDS
from .utils import (
    ConfigurationManager,
    create_compression_report,
    evaluate_compression_quality,
    load_image,
    save_image
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="imageslim",
        description="Compress an image by truncating the SVD of each color channel"
    )

    parser.add_argument(
        "input",
        type=str,
        help="Input image file"
    )

    parser.add_argument(
        "-c", "--compression",
        dest="level",
        type=int,
        default=None,
        help="Compression level (0 - none, 9 - max)"
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output image file (default: out.jpg)"
    )

    parser.add_argument(
        "--format",
        type=str,
        default=None,
        help="Output format, e.g. JPEG, PNG or jpg (default: inferred from the output suffix)"
    )

    parser.add_argument(
        "--quality",
        type=int,
        default=None,
        help="Encoder quality for lossy output formats"
    )

    parser.add_argument(
        "--backend",
        type=str,
        choices=sorted(BACKENDS),
        default=None,
        help="SVD backend"
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON configuration file; command line flags take precedence"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print a quality report for the compressed image"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    return parser.parse_args(argv)


def _configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    package_logger = logging.getLogger("imageslim")
    if verbose:
        package_logger.setLevel(logging.DEBUG)
    elif quiet:
        package_logger.setLevel(logging.WARNING)
    else:
        package_logger.setLevel(logging.INFO)


def main(argv: Optional[List[str]] = None) -> int:
    """Compress one image file. Returns the process exit status."""
    args = parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        if args.config:
            config = ConfigurationManager.load_compression_config(args.config)
        else:
            config = ConfigurationManager.create_default_config()

        compression = config["compression"]
        output = config["output"]

        level = validate_level(args.level if args.level is not None else compression["level"])
        output_path = Path(args.output or output["path"])

        compressor = ImageSlim(
            level=level,
            backend=args.backend or compression["backend"],
            method=compression["method"],
            max_workers=compression["max_workers"],
            progress_bar=not args.quiet
        )

        image = load_image(args.input)
        compressed = compressor.compress(image)
        save_image(
            compressed,
            output_path,
            image_format=args.format or output["format"],
            quality=args.quality if args.quality is not None else output["quality"]
        )
    except InvalidCompressionLevel as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except ImageSlimError as e:
        logger.error(f"Compression failed during {e.stage}: {e}")
        return 1
    except (KeyError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return 1

    if args.stats:
        results = evaluate_compression_quality(image, compressed, compressor.compression_stats)
        print(create_compression_report(results, image_name=Path(args.input).name))

    return 0


def _format_matrix(title: str, matrix: Tensor) -> str:
    lines = [f"{title} ({matrix.shape[0]}x{matrix.shape[1]}):"]
    for row in matrix.tolist():
        lines.append("  " + " ".join(f"{value:10.2f}" for value in row))
    return "\n".join(lines)


def parse_svd_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse arguments of the decomposition demo."""
    parser = argparse.ArgumentParser(
        prog="imageslim-svd",
        description="Print the SVD of a seeded random matrix"
    )

    parser.add_argument("rows", type=int, help="Number of rows")
    parser.add_argument("cols", type=int, help="Number of columns")
    parser.add_argument(
        "-s", "--singular",
        type=int,
        default=None,
        help="Number of singular values to show (default: all)"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed")

    args = parser.parse_args(argv)
    if args.rows < 1 or args.cols < 1:
        parser.error("rows and cols must be positive")
    if args.singular is not None and args.singular < 1:
        parser.error("--singular must be positive")
    return args


def svd_demo_main(argv: Optional[List[str]] = None) -> int:
    """Decompose a random matrix and print its truncated factors."""
    args = parse_svd_args(argv)

    generator = torch.Generator().manual_seed(args.seed)
    matrix = torch.floor(
        torch.rand(args.rows, args.cols, generator=generator, dtype=torch.float64) * 1000
    )

    try:
        decomposition = decompose(matrix)
    except DecompositionError as e:
        logger.error(f"Decomposition failed: {e}")
        return 1

    n = decomposition.max_rank if args.singular is None else min(args.singular, decomposition.max_rank)

    print(_format_matrix("Source matrix", matrix))
    print(_format_matrix("U matrix", decomposition.U[:, :n]))
    print(_format_matrix("Singular values", torch.diag(decomposition.S[:n])))
    print(_format_matrix("Vt matrix", decomposition.Vt[:n, :]))
    return 0


if __name__ == "__main__":
    sys.exit(main())
