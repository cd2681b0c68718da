"""Abort tracker and analytics requests before they leave the browser."""

from __future__ import annotations

import logging

from playwright.async_api import Page, Route

from competitor_ui.url_utils import host_of

logger = logging.getLogger(__name__)

BLOCKED_TRACKER_DOMAINS = (
    "doubleclick.net",
    "google-analytics.com",
    "googletagmanager.com",
    "facebook.net",
    "hotjar.com",
)


def is_blocked_request(url: str, domains: tuple[str, ...] = BLOCKED_TRACKER_DOMAINS) -> bool:
    """True if the request host is a deny-listed domain or one of its subdomains."""
    host = host_of(url)
    if not host:
        return False
    return any(host == d or host.endswith("." + d) for d in domains)


async def _handle_route(route: Route) -> None:
    url = route.request.url
    if is_blocked_request(url):
        logger.debug("Blocked tracker request: %s", url[:120])
        await route.abort()
    else:
        await route.continue_()


async def install_tracker_block(page: Page) -> None:
    """Route every request on ``page`` through the deny-list."""
    await page.route("**/*", _handle_route)
