"""Command line interface for the OX3 API client.

Examples
--------
.. code-block:: bash

    # Write a credentials template to ~/openx_config.json
    ox3-client init-config

    # Print the ad category options
    ox3-client options /options/ad_category_options

    # List ad units
    ox3-client get /adunit -p offset=0 -p limit=500
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import httpx

from .auth import establish_from_file
from .config import DEFAULT_CONFIG_FILENAME, create_config_template, get_settings
from .exceptions import OX3Error
from .utils.security import setup_secure_logging

logger = logging.getLogger(__name__)


def _parse_params(pairs: List[str]) -> Dict[str, str]:
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"expected key=value, got {pair!r}")
        params[key] = value
    return params


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    settings = get_settings()
    default_config = settings.config_file or str(
        Path.home() / DEFAULT_CONFIG_FILENAME
    )

    parser = argparse.ArgumentParser(
        prog="ox3-client", description="OpenX OX3 API client"
    )
    parser.add_argument(
        "--config",
        default=default_config,
        help=f"JSON credentials file (default: {default_config})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.debug,
        help="Log each handshake step",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-config", help="Write a credentials template")
    init.add_argument("path", nargs="?", default=str(Path.home()))

    options = sub.add_parser("options", help="GET an /options entry")
    options.add_argument("endpoint", nargs="?", default="")

    get = sub.add_parser("get", help="GET an API endpoint")
    get.add_argument("endpoint")
    get.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter, may be repeated",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """Execute the parsed command and return the exit status."""
    if args.command == "init-config":
        path = create_config_template(args.path)
        print(path)
        return 0

    params = _parse_params(args.param) if args.command == "get" else None
    with establish_from_file(args.config, debug=args.debug) as client:
        if args.command == "options":
            response = client.options(args.endpoint)
        else:
            response = client.get(args.endpoint, params)

    print(response.text)
    return 0 if response.is_success else 1


def main(argv: Optional[List[str]] = None) -> None:
    """Run the OX3 command line client."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_secure_logging(level=args.log_level)

    try:
        status = run(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except OX3Error as e:
        logger.error(f"{e.code}: {e.message}")
        status = 2
    except httpx.TransportError as e:
        logger.error(f"Transport error: {e}")
        status = 3
    sys.exit(status)


if __name__ == "__main__":
    main()
