"""CLI entry point and argument parsing"""

import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console

import settings
from config.loader import ConfigError
from utils.storage import StorageError
from cli.cli_app import OidcClientCLI
from cli.debug_setup import setup_logging


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="OpenID Connect relying-party client")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sign_in = subparsers.add_parser("sign-in", help="Sign in with the Authorization Code + PKCE flow")
    sign_in.add_argument(
        "--redirect-uri",
        default=None,
        help=f"Redirect URI registered for the client (default: {settings.REDIRECT_URI})",
    )
    sign_in.add_argument(
        "--listen",
        action="store_true",
        help="Capture the redirect with a local callback server instead of pasting it",
    )

    sign_out = subparsers.add_parser("sign-out", help="Revoke tokens and end the session")
    sign_out.add_argument("--post-logout-redirect-uri", default=None)

    subparsers.add_parser("status", help="Show authentication status")

    decode = subparsers.add_parser("decode", help="Decode an ID token without verifying it")
    decode.add_argument("token")

    verify = subparsers.add_parser("verify", help="Verify an ID token against the provider's keys")
    verify.add_argument("token")

    return parser


def main(argv: Optional[List[str]] = None):
    """Entry point for the CLI"""
    args = build_parser().parse_args(argv)
    setup_logging(console, debug=args.debug, log_level=settings.LOG_LEVEL)

    cli = OidcClientCLI(console)

    try:
        if args.command == "sign-in":
            ok = asyncio.run(cli.sign_in(args.redirect_uri, listen=args.listen))
        elif args.command == "sign-out":
            ok = asyncio.run(cli.sign_out(args.post_logout_redirect_uri))
        elif args.command == "status":
            ok = cli.status()
        elif args.command == "decode":
            ok = cli.decode(args.token)
        else:
            ok = asyncio.run(cli.verify(args.token))
    except ConfigError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        sys.exit(2)
    except StorageError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
