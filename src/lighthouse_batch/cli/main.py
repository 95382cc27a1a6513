"""CLI entrypoint for batch Lighthouse runs."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..core.config import ConfigError, env_overrides, load_config, merge_configs
from ..core.errors import NoValidUrlsError
from ..core.orchestrator import run_batch_audit
from ..core.urls import load_urls

# Load environment variables
load_dotenv()


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration.

    Args:
        level: Logging level
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Options left unset fall through to the config files.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Lighthouse Batch Runner - audit a list of URLs and summarize scores",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Audit the URLs in urls.txt, writing lighthouse-results.csv
  lighthouse-batch

  # Custom URL list and summary name
  lighthouse-batch --urls sites.txt --output weekly

  # Four audits at a time, one retry, 60s page load budget
  lighthouse-batch -c 4 -r 1 -t 60
        """,
    )

    parser.add_argument(
        "-o",
        "--output",
        type=str,
        help="Summary file base name, '.csv' is appended (default: lighthouse-results)",
    )

    parser.add_argument(
        "-u",
        "--urls",
        type=Path,
        help="Line-delimited URLs file (default: urls.txt)",
    )

    parser.add_argument(
        "-r",
        "--retries",
        type=int,
        help="Number of retries on failure (default: 2)",
    )

    parser.add_argument(
        "-t",
        "--timeout",
        type=int,
        help="Page load timeout in seconds (default: 45)",
    )

    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        help="Audits run at once; 1 runs sequentially (default: 1)",
    )

    parser.add_argument(
        "--reports-dir",
        type=Path,
        help="Directory for per-URL JSON/HTML reports (default: reports)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="YAML config merged over configs/default.yaml",
    )

    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Run the browser in headed mode (visible)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Translate explicitly given CLI flags into config overrides."""
    overrides: dict[str, Any] = {}

    run: dict[str, Any] = {}
    if args.retries is not None:
        run["retries"] = args.retries
    if args.timeout is not None:
        run["timeout_seconds"] = args.timeout
    if args.concurrency is not None:
        run["concurrency"] = args.concurrency
    if run:
        overrides["run"] = run

    report: dict[str, Any] = {}
    if args.output:
        report["output"] = args.output
    if args.reports_dir:
        report["reports_dir"] = str(args.reports_dir)
    if report:
        overrides["report"] = report

    if args.urls:
        overrides["urls_file"] = str(args.urls)

    if args.no_headless:
        overrides["browser"] = {"headless": False}

    return overrides


async def main_async(argv: list[str] | None = None) -> int:
    """Async main function.

    Returns:
        Exit code: 0 when the run completes (even with per-URL failures),
        1 when there is nothing to audit or the run cannot start or finish,
        130 when interrupted
    """
    args = parse_args(argv)

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)
    logger.info("Lighthouse Batch Runner")

    try:
        config = load_config(
            config_path=args.config,
            overrides=merge_configs(env_overrides(), build_overrides(args)),
        )

        urls = load_urls(Path(config.urls_file), config.default_urls)
        if not urls:
            logger.error("No valid URLs to test. Exiting.")
            return 1

        summary = await run_batch_audit(config, urls)

        logger.info("=" * 60)
        logger.info("RUN COMPLETE")
        logger.info("=" * 60)
        logger.info(f"Audited: {summary.succeeded}/{len(summary.results)} URLs succeeded")
        if summary.failed:
            logger.warning(f"Failed: {summary.failed} URLs (see Error column)")
        logger.info(f"Reports saved in: ./{config.report.reports_dir}/")
        logger.info(f"CSV results: {summary.summary_path}")
        logger.info("=" * 60)
        return 0

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    except NoValidUrlsError as e:
        logger.error(f"{e}. Exiting.")
        return 1

    except OSError as e:
        logger.error(f"Cannot write reports: {e}")
        return 1

    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
        return 130

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


def main() -> None:
    """Main CLI entrypoint."""
    sys.exit(asyncio.run(main_async()))


if __name__ == "__main__":
    main()
