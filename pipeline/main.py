"""
Command-line entry point.

    debate-analysis --config config.yaml
"""

import argparse
import logging
import sys
from typing import Optional, List

from analysis.errors import AnalysisError

from .config import AnalysisConfig
from .logging_config import setup_logging
from .runner import AnalysisPipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Entropy-weighted SVD analysis of debate language and audience vote shift"
    )
    parser.add_argument('--config', default='config.yaml', help="YAML configuration file")
    parser.add_argument('--data-file', help="Override the input table from the config")
    parser.add_argument('--output-dir', help="Override the report directory from the config")
    parser.add_argument('--overwrite-split', action='store_true',
                        help="Regenerate train/test split files even if they exist")
    parser.add_argument('--no-progress', action='store_true', help="Hide the stage progress bar")
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('--log-file', help="Also write a detailed log to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, log_file=args.log_file)

    try:
        config = AnalysisConfig.from_yaml(args.config)
        if args.data_file:
            config.data_file = args.data_file
        if args.output_dir:
            config.output_dir = args.output_dir
        if args.overwrite_split:
            config.overwrite_split = True
        if args.no_progress:
            config.show_progress = False
        config.validate()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        context = AnalysisPipeline(config).run()
    except AnalysisError as e:
        logger.error(f"Analysis failed at {e.location()}: {e.message}")
        return 1
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    print(context.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
