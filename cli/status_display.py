"""Status display functionality for CLI"""

from datetime import datetime, timezone
from typing import Optional

from rich.console import Console
from rich.table import Table

from oidc_client import IDToken, OidcClient, OidcClientError


def format_expiry(expires_at: int, now: Optional[datetime] = None) -> str:
    """
    Describe an expiry timestamp relative to now

    Args:
        expires_at: Unix seconds
        now: Reference time (default: current UTC time)

    Returns:
        e.g. "in 1h 5m" or "expired 3m ago"
    """
    now = now or datetime.now(timezone.utc)
    delta = int(expires_at - now.timestamp())
    seconds = abs(delta)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    time_str = f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"
    return f"in {time_str}" if delta > 0 else f"expired {time_str} ago"


def claims_table(claims: IDToken, title: str = "ID Token Claims") -> Table:
    """Render ID token claims as a table"""
    table = Table(title=title)
    table.add_column("Claim", style="cyan")
    table.add_column("Value")

    table.add_row("iss", claims.issuer)
    table.add_row("sub", claims.subject)
    table.add_row("aud", claims.audience)
    table.add_row("iat", datetime.fromtimestamp(claims.issued_at, timezone.utc).isoformat())
    table.add_row(
        "exp",
        f"{datetime.fromtimestamp(claims.expires_at, timezone.utc).isoformat()} ({format_expiry(claims.expires_at)})",
    )
    if claims.access_token_hash:
        table.add_row("at_hash", claims.access_token_hash)
    return table


def show_status(client: OidcClient, console: Console, token_file: str):
    """
    Display authentication status

    Args:
        client: OidcClient instance
        console: Rich console for output
        token_file: Where durable tokens are stored
    """
    table = Table(title="Authentication Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Client ID", client.config.client_id)
    table.add_row("Endpoint", client.config.endpoint)
    table.add_row("State", client.state.value)
    table.add_row("Refresh Token", "Yes" if client.tokens.refresh_token else "No")
    table.add_row("Token File", token_file)
    console.print(table)

    if not client.is_authenticated:
        return

    try:
        claims = client.get_id_token_claims()
    except OidcClientError as e:
        console.print(f"[red]Stored ID token is unreadable:[/red] {e.message}")
        return

    console.print(claims_table(claims, title="ID Token Claims (unverified)"))
