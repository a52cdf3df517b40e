"""
Page readiness - wait for a client-rendered page to finish rendering

The target pages render their content client-side after the load event,
so an initial pass run straight after `load` sees an almost empty body.
These helpers wait for the load state and then for the amount of rendered
text to stop growing before the first pass runs.
"""

import asyncio
import logging

from playwright.async_api import Error as PlaywrightError

logger = logging.getLogger(__name__)


async def wait_for_render_settled(
    page,
    timeout_ms: int = 5000,
    check_interval_ms: int = 200,
    min_text_length: int = 1,
) -> bool:
    """
    Wait until the rendered text length is stable across two checks.

    Args:
        page: Playwright page object
        timeout_ms: Maximum wait time in milliseconds
        check_interval_ms: Interval between checks
        min_text_length: Minimum body text length for a rendered page

    Returns:
        True if the page settled, False on timeout
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_ms / 1000
    interval = check_interval_ms / 1000

    previous = -1
    stable_checks = 0
    while loop.time() < deadline:
        try:
            length = await page.evaluate(
                "() => document.body ? document.body.innerText.length : 0"
            )
        except PlaywrightError as e:
            # navigation in progress destroys the execution context
            logger.debug(f"Render check error: {e}")
            length = -1

        if length >= min_text_length and length == previous:
            stable_checks += 1
            if stable_checks >= 2:
                logger.debug(f"Page render settled: {length} characters")
                return True
        else:
            stable_checks = 0
            previous = length
        await asyncio.sleep(interval)

    logger.debug(f"Page render not settled after {timeout_ms}ms ({previous} characters)")
    return False


async def ensure_page_ready(page, wait_ms: int = 5000) -> bool:
    """
    Wait for the load event, then for client-side rendering to settle.

    Args:
        page: Playwright page object
        wait_ms: Maximum wait time in milliseconds for each phase
    """
    try:
        await page.wait_for_load_state("load", timeout=wait_ms)
    except PlaywrightError as e:
        logger.debug(f"Load state not reached: {e}")
    return await wait_for_render_settled(page, timeout_ms=wait_ms)
