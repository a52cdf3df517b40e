"""
Pytest configuration for browser tests

These tests drive a real Chromium through Playwright and are skipped when
Playwright or its browser is not installed.
"""

import os

import pytest


def pytest_configure(config):
    """Configure pytest"""
    os.environ['GLOSSA_HEADLESS'] = 'true'


@pytest.fixture
async def browser_page():
    """Provide a browser page for tests"""
    async_api = pytest.importorskip("playwright.async_api")

    async with async_api.async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=True)
        except async_api.Error as e:
            pytest.skip(f"Chromium not available: {e}")
        page = await browser.new_page()
        yield page
        await browser.close()
