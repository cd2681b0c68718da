"""Capture engine: screenshots every (URL, viewport) pair in an isolated context."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from playwright.async_api import Browser, Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from competitor_ui.capture.consent import dismiss_consent_banner
from competitor_ui.capture.tracker_block import install_tracker_block
from competitor_ui.capture.viewports import resolve_viewport
from competitor_ui.errors import CaptureError, FatalCaptureFailure
from competitor_ui.models.capture import (
    CaptureFailure,
    CaptureResult,
    CaptureSuccess,
    PageMetadata,
    Screenshots,
    ViewportSize,
)
from competitor_ui.models.config import AnalysisConfig
from competitor_ui.pacing import RateLimiter
from competitor_ui.url_utils import slugify_url
from competitor_ui.utils.browser_stealth import create_isolated_context, launch_browser
from competitor_ui.utils.timestamps import file_stamp, utc_timestamp

logger = logging.getLogger(__name__)


class CaptureEngine:
    """Captures full-page and first-viewport screenshots with Playwright.

    Pairs are processed one at a time in URL-major order. Each pair gets its
    own browser context, and a fixed delay separates consecutive pairs. A
    failing pair becomes a CaptureFailure; the batch always runs to the end.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        output_dir: Path,
        limiter: RateLimiter | None = None,
    ):
        self.config = config
        self.output_dir = output_dir
        self.limiter = limiter or RateLimiter(config.capture_delay_seconds, name="capture")

    async def capture(self, urls: list[str], viewports: list[str]) -> list[CaptureResult]:
        """Capture every (URL, viewport) pair and return results in input order."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        results: list[CaptureResult] = []
        start = time.time()

        try:
            async with async_playwright() as p:
                browser = await launch_browser(p)
                try:
                    for url in urls:
                        for vp_name in viewports:
                            async with self.limiter:
                                results.append(await self._capture_pair(browser, url, vp_name))
                finally:
                    try:
                        await browser.close()
                    except Exception as e:
                        logger.debug("Browser close failed: %s", e)
        except Exception as e:
            # Per-pair errors never get here; this is the browser or driver itself.
            if not results:
                logger.error("Could not start browser: %s", e)
                raise FatalCaptureFailure(attempted=len(urls) * len(viewports)) from e
            logger.error("Browser driver failed after %d capture(s): %s", len(results), e)
            pairs = [(url, vp_name) for url in urls for vp_name in viewports]
            for url, vp_name in pairs[len(results):]:
                results.append(CaptureFailure(url=url, viewport=vp_name,
                                              error=f"Browser unavailable: {e}",
                                              timestamp=utc_timestamp()))

        ok = sum(1 for r in results if isinstance(r, CaptureSuccess))
        logger.info("Captured %d/%d pages in %.1fs", ok, len(results), time.time() - start)
        return results

    async def _capture_pair(self, browser: Browser, url: str, vp_name: str) -> CaptureResult:
        viewport = resolve_viewport(vp_name)
        logger.info("Capturing %s [%s]...", url, vp_name)
        try:
            context = await create_isolated_context(
                browser, viewport,
                locale=self.config.locale,
                user_agent=self.config.user_agent,
            )
        except Exception as e:
            logger.error("Could not open browser context for %s [%s]: %s", url, vp_name, e)
            return CaptureFailure(url=url, viewport=vp_name, error=str(e),
                                  timestamp=utc_timestamp())

        try:
            page = await context.new_page()
            if self.config.block_trackers:
                await install_tracker_block(page)

            await self._navigate(page, url)
            await dismiss_consent_banner(page)
            # Late-loading hero images, carousels and web fonts
            await page.wait_for_timeout(self.config.settle_ms)

            screenshots = await self._take_screenshots(page, url, vp_name)
            metadata = PageMetadata(
                title=await _page_title(page),
                description=await _meta_description(page),
                timestamp=utc_timestamp(),
                viewport_size=ViewportSize(width=viewport.width, height=viewport.height),
            )
            logger.info("Done: %s", metadata.title or url)
            return CaptureSuccess(url=url, viewport=vp_name,
                                  screenshots=screenshots, metadata=metadata)
        except Exception as e:
            logger.error("Error capturing %s [%s]: %s", url, vp_name, e)
            return CaptureFailure(url=url, viewport=vp_name, error=str(e),
                                  timestamp=utc_timestamp())
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.debug("Context close failed: %s", e)

    async def _navigate(self, page: Page, url: str) -> None:
        """Wait for network idle; fall back to DOM ready plus a settle delay."""
        timeout = self.config.navigation_timeout_ms
        try:
            await page.goto(url, wait_until="networkidle", timeout=timeout)
            return
        except PlaywrightTimeoutError:
            logger.info("Network never went idle for %s, retrying with domcontentloaded", url)

        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        except Exception as e:
            raise CaptureError(f"Navigation failed: {e}") from e
        await page.wait_for_timeout(self.config.fallback_settle_ms)

    async def _take_screenshots(self, page: Page, url: str, vp_name: str) -> Screenshots:
        prefix = f"{slugify_url(url)}__{slugify_url(vp_name)}__{file_stamp(utc_timestamp())}"
        full_path = self.output_dir / f"{prefix}__full.png"
        fold_path = self.output_dir / f"{prefix}__fold.png"
        try:
            await page.screenshot(path=str(full_path), full_page=True)
            await page.screenshot(path=str(fold_path), full_page=False)
        except Exception as e:
            raise CaptureError(f"Screenshot failed: {e}") from e
        return Screenshots(full=str(full_path), fold=str(fold_path))


async def _page_title(page: Page) -> str:
    try:
        return await page.title()
    except Exception as e:
        logger.debug("Title extraction failed: %s", e)
        return ""


async def _meta_description(page: Page) -> str:
    try:
        content = await page.eval_on_selector(
            'meta[name="description"]',
            "el => el.getAttribute('content') || ''",
        )
        return content or ""
    except Exception:
        return ""
