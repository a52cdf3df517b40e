#!/usr/bin/env python3
import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .config import Config

logger = logging.getLogger(__name__)


def _install_chromium() -> bool:
    """Run `playwright install chromium`; True when it succeeded."""
    logger.info("Playwright browser missing, installing chromium...")
    try:
        result = subprocess.run(
            [sys.executable, "-m", "playwright", "install", "chromium"],
            capture_output=True,
            text=True,
            timeout=300,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Failed to install Playwright browsers: {e}")
        return False
    if result.returncode != 0:
        logger.warning(f"Playwright install warning: {result.stderr[:200]}")
        return False
    return True


@dataclass
class BrowserHandle:
    playwright: Any
    browser: Any
    context: Any
    page: Any

    async def close(self) -> None:
        try:
            await self.context.close()
            await self.browser.close()
        except PlaywrightError as e:
            logger.debug(f"Browser already closed: {e}")
        finally:
            await self.playwright.stop()


async def launch_page(config: Config) -> BrowserHandle:
    """Start Playwright, launch chromium and open one page."""
    playwright = await async_playwright().start()
    launch_args = {
        "headless": bool(config.headless),
        "args": [
            "--no-sandbox",
            "--disable-dev-shm-usage",
        ],
    }

    try:
        try:
            browser = await playwright.chromium.launch(**launch_args)
        except PlaywrightError as e:
            if "Executable doesn't exist" in str(e) and _install_chromium():
                browser = await playwright.chromium.launch(**launch_args)
            else:
                raise
    except PlaywrightError:
        await playwright.stop()
        raise

    context = await browser.new_context(viewport={"width": 1366, "height": 900})
    context.set_default_navigation_timeout(config.navigation_timeout_ms)
    page = await context.new_page()
    return BrowserHandle(playwright=playwright, browser=browser, context=context, page=page)
