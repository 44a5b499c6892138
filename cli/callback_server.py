"""
Local loopback server that captures the authorization redirect
"""
import asyncio
import logging
from typing import Optional

from aiohttp import web

logger = logging.getLogger(__name__)


SUCCESS_PAGE = """
<html>
    <body>
        <h1>Sign-in received</h1>
        <p>You can now close this window and return to the terminal.</p>
    </body>
</html>
"""


class CallbackServer:
    """Local HTTP server for the OAuth redirect

    Only records the full callback URL. State and error handling belong to
    OidcClient.handle_sign_in_callback, which runs on the captured URL.
    """

    def __init__(self, host: str, port: int, path: str):
        self.host = host
        self.port = port
        self.path = path
        self.callback_url: Optional[str] = None
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._event = asyncio.Event()

        # Register callback route
        self.app.router.add_get(path, self._handle_callback)

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Handle OAuth callback request"""
        if self._event.is_set():
            return web.Response(text="Callback already received", status=409)

        self.callback_url = str(request.url)
        self._event.set()
        logger.debug(f"Callback received on {self.path}")

        return web.Response(text=SUCCESS_PAGE, content_type="text/html")

    async def start(self) -> None:
        """Start the callback server"""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        site = web.TCPSite(self.runner, host=self.host, port=self.port)
        await site.start()
        logger.info(f"Callback server listening on http://{self.host}:{self.port}{self.path}")

    async def wait_for_callback(self, timeout: float = 300) -> Optional[str]:
        """
        Wait for the redirect.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            Callback URL, or None on timeout
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
            return self.callback_url
        except asyncio.TimeoutError:
            logger.error(f"No callback received after {timeout} seconds")
            return None

    async def stop(self) -> None:
        """Stop the callback server"""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
