"""CLI package for oidc-client

This package provides a command-line front-end for signing in and out
against an OpenID Connect provider.
"""

from cli.cli_app import OidcClientCLI
from cli.main import main

__all__ = [
    "OidcClientCLI",
    "main",
]
