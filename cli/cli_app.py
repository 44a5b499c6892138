"""Main CLI application class for oidc-client"""

import webbrowser
from typing import Optional

import httpx
from rich.console import Console

import settings
from config.loader import load_client_config
from oidc_client import OidcClient, OidcClientConfig, Requester, decode_unverified
from oidc_client.errors import OidcClientError
from utils.storage import FileStorage
from cli.auth_handlers import sign_in_flow, sign_out_flow, verify_token
from cli.callback_server import CallbackServer
from cli.status_display import claims_table, show_status


class OidcClientCLI:
    """Command implementations shared by the argparse front-end"""

    def __init__(
        self,
        console: Console,
        config: Optional[OidcClientConfig] = None,
        token_file: Optional[str] = None,
        session_file: Optional[str] = None,
    ):
        self.console = console
        self.config = config
        self.token_file = token_file or settings.TOKEN_FILE
        self.session_file = session_file or settings.SESSION_FILE

    def _open_browser(self, url: str) -> None:
        # Try to open browser
        if webbrowser.open(url):
            self.console.print("[green][OK][/green] Browser opened successfully")
        else:
            self.console.print("[yellow]Could not open browser automatically[/yellow]")
            self.console.print(f"Please open this URL manually:\n{url}")

    def build_client(self, http_client: Optional[httpx.AsyncClient] = None) -> OidcClient:
        """Create an OidcClient backed by the CLI's token and session files"""
        config = self.config or load_client_config()
        return OidcClient(
            config,
            durable_storage=FileStorage(self.token_file),
            session_storage=FileStorage(self.session_file),
            navigate=self._open_browser,
            requester=Requester(http_client, timeout=settings.REQUEST_TIMEOUT),
        )

    async def sign_in(self, redirect_uri: Optional[str] = None, listen: bool = False) -> bool:
        redirect_uri = redirect_uri or settings.REDIRECT_URI
        callback_server = None
        if listen:
            callback_server = CallbackServer(
                settings.CALLBACK_HOST,
                settings.CALLBACK_PORT,
                settings.CALLBACK_PATH,
            )

        async with httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT) as http_client:
            client = self.build_client(http_client)
            return await sign_in_flow(
                client,
                self.console,
                redirect_uri,
                callback_server=callback_server,
                timeout=settings.CALLBACK_TIMEOUT,
            )

    async def sign_out(self, post_logout_redirect_uri: Optional[str] = None) -> bool:
        async with httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT) as http_client:
            client = self.build_client(http_client)
            return await sign_out_flow(
                client,
                self.console,
                post_logout_redirect_uri or settings.POST_LOGOUT_REDIRECT_URI,
            )

    async def verify(self, token: str) -> bool:
        async with httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT) as http_client:
            client = self.build_client(http_client)
            return await verify_token(client, self.console, token)

    def status(self) -> bool:
        client = self.build_client()
        show_status(client, self.console, self.token_file)
        return client.is_authenticated

    def decode(self, token: str) -> bool:
        try:
            claims = decode_unverified(token)
        except OidcClientError as e:
            self.console.print(f"[red]Cannot decode token ({e.code}):[/red] {e.message}")
            return False

        self.console.print(claims_table(claims, title="ID Token Claims (unverified)"))
        return True
