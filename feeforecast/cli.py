"""Command-line interface for the fee forecaster."""

import sys
import json
import logging
import argparse
from .config import Config
from .runner import ForecastRunner
from .logging import setup_logging, get_logger
from .structured_output import StructuredOutputWriter

logger = get_logger(__name__)


def main(argv=None):
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Record a Bitcoin fee sample and print short-horizon fee forecasts."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: search for config.yaml)"
    )
    parser.add_argument(
        "--no-fetch",
        action="store_true",
        help="Predict from stored history without fetching a new sample"
    )
    parser.add_argument(
        "--count",
        action="store_true",
        help="Print the number of stored observations and exit"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete stored fee history and exit"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Pretty-print JSON output"
    )

    args = parser.parse_args(argv)

    try:
        config = Config(args.config)
    except FileNotFoundError as e:
        logging.basicConfig(level=logging.ERROR, format='[%(levelname)s] %(message)s')
        logger.error(f"Config file not found: {e}")
        sys.exit(1)
    except Exception as e:
        logging.basicConfig(level=logging.ERROR, format='[%(levelname)s] %(message)s')
        logger.error(f"Error loading config: {e}")
        sys.exit(1)

    setup_logging(config)

    structured_writer = None
    so_cfg = config.structured_output_config
    if so_cfg.get("enabled"):
        structured_writer = StructuredOutputWriter(
            base_dir=so_cfg["base_dir"],
            observations_filename=so_cfg["observations_filename"],
            predictions_filename=so_cfg["predictions_filename"],
        )

    runner = ForecastRunner(config, structured_writer=structured_writer)
    try:
        if args.clear:
            runner.clear()
            print(json.dumps({"cleared": True}))
            return

        if args.count:
            print(json.dumps({"history_count": runner.service.get_historical_data_count()}))
            return

        result = runner.run_once(fetch=not args.no_fetch)
        if args.verbose:
            print(json.dumps(result, indent=2))
        else:
            print(json.dumps(result))
        logger.debug(f"One-shot run completed: {json.dumps(result)}")
    except Exception as e:
        logger.error(f"Error in one-shot run: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        runner.close()


if __name__ == "__main__":
    main()
