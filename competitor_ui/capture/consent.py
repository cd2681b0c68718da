"""Best-effort cookie / consent banner dismissal."""

from __future__ import annotations

import logging

from playwright.async_api import Page

logger = logging.getLogger(__name__)

# Tried in order; the first visible match is clicked.
CONSENT_SELECTORS = [
    '[id*="cookie"] button',
    '[class*="cookie"] button',
    '[id*="consent"] button',
    '[class*="consent"] button',
    'button:has-text("Accept all")',
    'button:has-text("Accept")',
    'button:has-text("Agree")',
    'button:has-text("OK")',
    'button:has-text("同意")',
    'button:has-text("承認")',
]


async def dismiss_consent_banner(
    page: Page,
    selectors: list[str] | None = None,
    click_timeout_ms: int = 2000,
    settle_ms: int = 500,
) -> bool:
    """Click the first visible consent button. Returns True if one was clicked.

    Never raises: a banner that cannot be dismissed simply stays in the shot.
    """
    for selector in selectors or CONSENT_SELECTORS:
        try:
            button = page.locator(selector).first
            if not await button.is_visible():
                continue
            await button.click(timeout=click_timeout_ms)
            await page.wait_for_timeout(settle_ms)
            logger.debug("Dismissed consent banner via %s", selector)
            return True
        except Exception as e:
            logger.debug("Consent selector %s failed: %s", selector, e)
    return False
