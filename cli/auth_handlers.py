"""Authentication handlers for CLI"""

import logging
from typing import Optional

from rich.console import Console

from oidc_client import OidcClient, OidcClientError, verify_id_token
from cli.callback_server import CallbackServer

logger = logging.getLogger(__name__)


async def sign_in_flow(
    client: OidcClient,
    console: Console,
    redirect_uri: str,
    callback_server: Optional[CallbackServer] = None,
    timeout: float = 300,
) -> bool:
    """
    Run a complete sign-in

    With a callback server the redirect is captured on the loopback
    interface, otherwise the user pastes the callback URL.

    Args:
        client: OidcClient instance
        console: Rich console for output
        redirect_uri: Redirect URI registered for the client
        callback_server: Optional loopback server to capture the redirect
        timeout: Seconds to wait for the loopback callback

    Returns:
        True if sign-in completed
    """
    if client.is_authenticated:
        console.print("[yellow]Already signed in - signing in again replaces the stored tokens[/yellow]")

    try:
        if callback_server is not None:
            await callback_server.start()

        # Step 1: Authorization URL and browser
        console.print("\n[bold]Step 1:[/bold] Opening browser for sign-in...")
        try:
            await client.sign_in(redirect_uri)
        except OidcClientError as e:
            console.print(f"[red]Could not start sign-in:[/red] {e.message}")
            return False

        # Step 2: Callback URL
        if callback_server is not None:
            console.print(f"\n[bold]Step 2:[/bold] Waiting for the redirect to {redirect_uri} ...")
            callback_url = await callback_server.wait_for_callback(timeout=timeout)
            if not callback_url:
                console.print("[red]No callback received - sign-in abandoned[/red]")
                return False
        else:
            console.print("\n[bold]Step 2:[/bold] Paste the callback URL below")
            console.print(f"[dim]The URL should start with: {redirect_uri}[/dim]\n")
            try:
                callback_url = input("Callback URL: ").strip()
            except (KeyboardInterrupt, EOFError):
                console.print("\n[yellow]Sign-in cancelled by user[/yellow]")
                return False
    finally:
        if callback_server is not None:
            await callback_server.stop()

    # Step 3: Code exchange and ID token verification
    console.print("\n[bold]Step 3:[/bold] Exchanging code for tokens...")
    try:
        claims = await client.handle_sign_in_callback(callback_url)
    except OidcClientError as e:
        console.print(f"[red]Sign-in failed ({e.code}):[/red] {e.message}")
        logger.debug(f"Sign-in failure details: {e.details}")
        return False

    console.print("[green][OK][/green] Signed in")
    console.print(f"\n[bold]Subject:[/bold] {claims.get('sub')}")
    return True


async def sign_out_flow(
    client: OidcClient,
    console: Console,
    post_logout_redirect_uri: Optional[str] = None,
) -> bool:
    """
    Sign out locally and open the end-session page

    Returns:
        True if there was a session to end
    """
    if not client.is_authenticated:
        console.print("[yellow]Not signed in - nothing to do[/yellow]")
        return False

    try:
        await client.sign_out(post_logout_redirect_uri or None)
    except OidcClientError as e:
        console.print(f"[red]Sign-out failed:[/red] {e.message}")
        return False

    console.print("[green][OK][/green] Signed out, local tokens cleared")
    return True


async def verify_token(client: OidcClient, console: Console, token: str) -> bool:
    """
    Verify an ID token against the provider's key set

    Returns:
        True if the token verified
    """
    try:
        oidc_config = await client.get_oidc_config()
        key_source = await client.get_key_source()
        claims = await verify_id_token(
            key_source,
            token,
            audience=client.config.client_id,
            issuer=oidc_config.issuer,
        )
    except OidcClientError as e:
        console.print(f"[red]Verification failed ({e.code}):[/red] {e.message}")
        return False

    console.print("[green][OK][/green] ID token verified")
    console.print_json(data=claims)
    return True
