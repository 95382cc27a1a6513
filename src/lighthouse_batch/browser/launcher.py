"""Per-job Chromium launcher exposing a remote debugging port."""

import logging
import socket
from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import Browser, async_playwright
from playwright.async_api import Error as PlaywrightError

from ..core.types import BrowserConfig
from .errors import LaunchError

logger = logging.getLogger(__name__)

MAX_PORT_ATTEMPTS = 20


def find_free_port(host: str = "127.0.0.1", exclude: Collection[int] = ()) -> int:
    """Ask the OS for an unused TCP port not in ``exclude``.

    Raises:
        LaunchError: If every port offered by the OS is excluded
    """
    for _ in range(MAX_PORT_ATTEMPTS):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, 0))
            port = int(sock.getsockname()[1])
        if port not in exclude:
            return port
    raise LaunchError("No free remote debugging port available")


class LaunchedBrowser:
    """A running browser owned by exactly one audit job.

    ``kill()`` is idempotent and never raises; each resource is closed
    independently so a failure in one does not leak the others.
    """

    def __init__(self, port: int, browser: Browser | None, playwright: Any):
        self.port = port
        self._browser = browser
        self._playwright = playwright

    @property
    def alive(self) -> bool:
        return self._browser is not None

    async def kill(self) -> None:
        """Close the browser and stop its Playwright driver."""
        if self._browser:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"Failed to close browser on port {self.port}: {e}")
            finally:
                self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Failed to stop playwright: {e}")
            finally:
                self._playwright = None

        logger.debug(f"Browser on port {self.port} closed")


class ChromeLauncher:
    """Launches one isolated Chromium instance per audit.

    Lighthouse connects to the instance over the DevTools port, so the
    browser is started without any page of its own.
    Ports handed to running instances stay reserved until the instance is
    killed, so concurrent jobs of one launcher never share a port. Another
    process can still take a port between selection and launch.
    """

    def __init__(self, config: BrowserConfig):
        """Initialize launcher.

        Args:
            config: Browser launch configuration
        """
        self.config = config
        self.ports_in_use: set[int] = set()

    def launch_args(self, port: int) -> list[str]:
        return [f"--remote-debugging-port={port}", *self.config.chrome_flags]

    async def start(self) -> LaunchedBrowser:
        """Start a browser on a reserved port.

        Prefer ``launch()``, which kills the browser and releases the port.

        Raises:
            LaunchError: If no port is free or Playwright cannot start Chromium
        """
        port = find_free_port(exclude=self.ports_in_use)
        self.ports_in_use.add(port)
        try:
            return await self._start_on(port)
        except BaseException:
            self.ports_in_use.discard(port)
            raise

    async def _start_on(self, port: int) -> LaunchedBrowser:
        logger.debug(f"Launching Chromium with remote debugging on port {port}")

        try:
            playwright = await async_playwright().start()
        except (PlaywrightError, OSError) as e:
            raise LaunchError(f"Failed to start Playwright: {e}") from e

        try:
            browser = await playwright.chromium.launch(
                headless=self.config.headless,
                executable_path=self.config.executable_path,
                args=self.launch_args(port),
            )
        except Exception as e:
            try:
                await playwright.stop()
            except Exception as stop_err:
                logger.warning(f"Failed to stop playwright: {stop_err}")
            raise LaunchError(f"Failed to launch browser: {e}") from e

        return LaunchedBrowser(port, browser, playwright)

    @asynccontextmanager
    async def launch(self) -> AsyncIterator[LaunchedBrowser]:
        """Scoped browser: killed on every exit path, including cancellation."""
        browser = await self.start()
        try:
            yield browser
        finally:
            await browser.kill()
            self.ports_in_use.discard(browser.port)
