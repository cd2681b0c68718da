"""Browser setup: one Chromium per run, one isolated, de-automated context per capture."""

from __future__ import annotations

from typing import Optional

from playwright.async_api import Browser, BrowserContext, Playwright

from competitor_ui.models.config import ViewportConfig

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

# Headless Chromium advertises automation in a few places that consent walls
# and bot filters check before rendering the real page.
_STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
if (!window.chrome) { window.chrome = { runtime: {} }; }
"""


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch the single Chromium process shared by every capture in a run."""
    return await playwright.chromium.launch(
        headless=headless,
        args=["--disable-blink-features=AutomationControlled"],
    )


async def create_isolated_context(
    browser: Browser,
    viewport: ViewportConfig,
    locale: str = "en-US",
    user_agent: Optional[str] = None,
) -> BrowserContext:
    """Create a fresh context: no cookies, cache or storage shared with other captures."""
    context = await browser.new_context(
        viewport=viewport.size(),
        user_agent=user_agent or DEFAULT_USER_AGENT,
        locale=locale,
        extra_http_headers={"Accept-Language": f"{locale},en;q=0.9"},
    )
    await context.add_init_script(_STEALTH_INIT_SCRIPT)
    return context
