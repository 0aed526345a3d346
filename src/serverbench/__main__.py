"""
Command-line entry point for serverbench
"""

import argparse
import logging
import sys

from ._cache import ResultCache
from ._config import load_settings, setup_logging
from ._orchestrator import main_flow
from ._rewrk import BenchConfig

logger = logging.getLogger(__name__)


def create_parser(settings) -> argparse.ArgumentParser:
    """Build the argument parser, using ``settings`` for defaults"""
    bench = settings.bench
    parser = argparse.ArgumentParser(
        prog="serverbench",
        description="Benchmark an HTTP server with rewrk and compare against cached runs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare a fresh run of the "fastify" configuration against the cache
  serverbench --name fastify

  # Same, and store the result for the next comparison
  CURRENT_BENCH=fastify serverbench --save
""",
    )
    parser.add_argument(
        "--name", default=settings.name,
        help="Benchmark name of this run (default: $CURRENT_BENCH)",
    )
    parser.add_argument(
        "--save", action="store_true",
        help="Store the result in the cache under --name",
    )
    parser.add_argument(
        "save_legacy", nargs="?", choices=["true", "false"], metavar="true|false",
        help="Positional form of --save",
    )
    parser.add_argument(
        "-t", "--threads", type=int, default=bench.threads,
        help=f"Load generator threads (default: {bench.threads})",
    )
    parser.add_argument(
        "-c", "--connections", type=int, default=bench.connections,
        help=f"Concurrent connections (default: {bench.connections})",
    )
    parser.add_argument(
        "-d", "--duration", type=int, default=bench.duration_seconds,
        help=f"Test duration in seconds (default: {bench.duration_seconds})",
    )
    parser.add_argument(
        "--url", default=bench.target_url,
        help=f"Target URL (default: {bench.target_url})",
    )
    parser.add_argument(
        "--rewrk", default=bench.executable,
        help=f"rewrk executable (default: {bench.executable})",
    )
    parser.add_argument(
        "--cache", default=str(settings.cache_file),
        help=f"Result cache file (default: {settings.cache_file})",
    )
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="Abort the load generator after this many seconds (default: no limit)",
    )
    parser.add_argument("--env-file", default=None, help="Load variables from this .env file")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def main(argv=None) -> int:
    # --env-file has to be known before the other defaults are computed
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--env-file", default=None)
    known, _ = pre.parse_known_args(argv)

    try:
        settings = load_settings(known.env_file)
    except ValueError as e:
        print(f"serverbench: error: {e}", file=sys.stderr)
        return 2

    parser = create_parser(settings)
    args = parser.parse_args(argv)

    if args.verbose:
        setup_logging(logging.DEBUG)
    elif args.quiet:
        setup_logging(logging.WARNING)
    else:
        setup_logging(logging.INFO)

    if not args.name:
        parser.error("no benchmark name given; use --name or set CURRENT_BENCH")

    try:
        config = BenchConfig(
            threads=args.threads,
            connections=args.connections,
            duration_seconds=args.duration,
            target_url=args.url,
            executable=args.rewrk,
        )
    except ValueError as e:
        parser.error(str(e))

    save = args.save or args.save_legacy == "true"
    logger.debug("Benchmark %r, save=%s, cache=%s", args.name, save, args.cache)

    return main_flow(
        config,
        args.name,
        ResultCache(args.cache),
        save=save,
        timeout=args.timeout,
    )


if __name__ == "__main__":
    sys.exit(main())
