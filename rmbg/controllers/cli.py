"""
Command-line interface controller
"""

import argparse
import logging
import os
import random
import sys
from typing import List, Optional

import yaml

from rmbg.utils.config import (
    load_config, update_config, resolve_thresholds, validate_configuration
)
from rmbg.utils.io import resolve_input_files
from rmbg.controllers.pipeline import remove_backgrounds

logger = logging.getLogger(__name__)

USAGE = "rmbg -t [floats] -i [list of files]"


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command-line parser

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog='rmbg',
        usage=USAGE,
        description='Remove photo backgrounds by contour tracing of Canny edges',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rmbg -i photos/*.jpg
  rmbg -t 10 80 -i cat.jpg dog.png
  python -m rmbg -i photos/*.jpg --config configs/config.yaml -w 4
Each input gets a transparent PNG next to it named <input>-<timestamp>.png
        """
    )

    parser.add_argument(
        '--input', '-i',
        nargs='+',
        metavar='FILE',
        help='List of image files',
        default=[]
    )

    parser.add_argument(
        '--thresholds', '-t',
        nargs='+',
        metavar='X',
        help='Canny filter thresholds (up to 2 numbers, default: 5 50)',
        default=None
    )

    # Configuration
    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Configuration YAML file (default: built-in settings)',
        default=None
    )

    parser.add_argument(
        '--workers', '-w',
        type=int,
        help='Maximum number of images processed at once (default: CPU count)',
        default=None
    )

    parser.add_argument(
        '--split-threshold',
        type=int,
        help='Largest batch processed without splitting (default: 8)',
        default=None
    )

    parser.add_argument(
        '--no-shuffle',
        action='store_true',
        help='Process files in the given order instead of a random one'
    )

    # Logging
    parser.add_argument(
        '--outlogs', '-l',
        type=str,
        help='Output directory for logs (default: from config)',
        default=None
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress non-error output'
    )

    return parser


def setup_logging(args, log_dir: Optional[str] = None):
    """
    Setup logging configuration based on CLI arguments

    Args:
        args: Parsed command-line arguments
        log_dir: Optional log directory
    """
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, 'processing.log')

        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setLevel(logging.DEBUG if args.verbose else logging.INFO)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(formatter)

        logging.getLogger().addHandler(file_handler)
        logger.info(f"Logging to file: {log_file}")


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for CLI
    """
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"rmbg: cannot load configuration: {e}", file=sys.stderr)
        sys.exit(1)

    config = update_config(config, {
        'batch.max_workers': args.workers,
        'batch.split_threshold': args.split_threshold,
        'batch.shuffle': False if args.no_shuffle else None,
        'paths.out_logs': args.outlogs,
    })

    setup_logging(args, config['paths'].get('out_logs'))

    if not validate_configuration(config):
        logger.error("Configuration validation failed")
        sys.exit(1)

    images = resolve_input_files(args.input)
    if not images:
        logger.error("No readable input files given")
        parser.print_usage(sys.stderr)
        sys.exit(1)

    default_pair = (float(config['canny']['low']), float(config['canny']['high']))
    low, high = resolve_thresholds(args.thresholds, default=default_pair)

    if config['batch']['shuffle']:
        random.shuffle(images)

    logger.info("=" * 60)
    logger.info("Contour Background Removal")
    logger.info("=" * 60)
    logger.info(f"Input files: {len(images)}")
    logger.info(f"Thresholds: low={low}, high={high}")
    logger.info(f"Split threshold: {config['batch']['split_threshold']}")
    logger.info(f"Max workers: {config['batch']['max_workers'] or os.cpu_count()}")
    logger.info("=" * 60)

    try:
        remove_backgrounds(
            images, low, high,
            split_threshold=config['batch']['split_threshold'],
            max_workers=config['batch']['max_workers'],
        )
    except KeyboardInterrupt:
        logger.info("Processing interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
