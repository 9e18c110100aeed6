"""
Command-line interface for Layer1 Digital SDK
Runs the MCP server and offers request-signing diagnostics
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from . import __version__
from .config import Layer1Config
from .exceptions import Layer1Error
from .signing import RFC9421Signer

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='layer1-digital',
        description='Layer1 digital asset MCP server with RFC 9421 request signing'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Layer1 Digital SDK {__version__}'
    )
    parser.add_argument(
        '--env-file',
        help='Load environment variables from this .env file before reading configuration'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Log level for messages written to stderr (default: INFO)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('serve', help='Run the MCP server on stdio (default)')

    sign_parser = subparsers.add_parser('sign', help='Print authentication headers for a request')
    sign_parser.add_argument('--method', default='GET', help='HTTP method (default: GET)')
    sign_parser.add_argument('--url', required=True, help='Absolute request URL including query string')
    sign_parser.add_argument('--body', default='', help='Exact serialized request body')
    sign_parser.add_argument('--show-base', action='store_true', help='Include the signature base in the output')

    return parser


def configure_logging(level: str) -> None:
    """Send logs to stderr; stdout is reserved for the MCP transport."""
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT, stream=sys.stderr)


def handle_serve(config: Layer1Config) -> int:
    """Handle serve command."""
    from .server import run_server

    asyncio.run(run_server(config))
    return 0


def handle_sign(args, config: Layer1Config) -> int:
    """Handle sign command."""
    signer = RFC9421Signer(config.private_key, config.client_id)
    result = signer.sign_request(args.url, args.body, args.method)

    output = {'headers': result.headers}
    if args.show_base:
        output['signature_base'] = result.signature_base

    print(json.dumps(output, indent=2))
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = Layer1Config.from_env(args.env_file)

        if args.command == 'sign':
            return handle_sign(args, config)
        return handle_serve(config)

    except Layer1Error as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == '__main__':
    sys.exit(main())
