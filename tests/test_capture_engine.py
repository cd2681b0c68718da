"""Tests for the Playwright capture engine (browser fully mocked)."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from competitor_ui.capture.consent import dismiss_consent_banner
from competitor_ui.capture.engine import CaptureEngine
from competitor_ui.errors import FatalCaptureFailure
from competitor_ui.models.capture import CaptureFailure, CaptureSuccess

from conftest import PNG_BYTES


def _make_page(title: str = "Example Domain", goto_side_effect=None, screenshot_error=None) -> MagicMock:
    page = MagicMock()
    page.goto = AsyncMock(side_effect=goto_side_effect)
    page.route = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.title = AsyncMock(return_value=title)
    page.eval_on_selector = AsyncMock(return_value="A description")
    page.locator.return_value.first.is_visible = AsyncMock(return_value=False)

    async def _screenshot(path, full_page):
        if screenshot_error:
            raise screenshot_error
        Path(path).write_bytes(PNG_BYTES)

    page.screenshot = AsyncMock(side_effect=_screenshot)
    return page


class FakeBrowser:
    """Hands out a fresh context per new_context call, recording each."""

    def __init__(self, pages):
        self._pages = list(pages)
        self.contexts = []
        self.close = AsyncMock()

    async def new_context(self, **kwargs):
        context = MagicMock()
        context.kwargs = kwargs
        context.add_init_script = AsyncMock()
        context.new_page = AsyncMock(return_value=self._pages.pop(0))
        context.close = AsyncMock()
        self.contexts.append(context)
        return context


def _patch_playwright(browser: FakeBrowser):
    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    manager = MagicMock()
    manager.__aenter__ = AsyncMock(return_value=playwright)
    manager.__aexit__ = AsyncMock(return_value=False)
    return patch("competitor_ui.capture.engine.async_playwright", return_value=manager)


@pytest.fixture
def engine(analysis_config, tmp_path):
    return CaptureEngine(analysis_config, tmp_path / "shots")


class TestCaptureEngine:

    @pytest.mark.asyncio
    async def test_single_capture(self, engine, tmp_path):
        page = _make_page()
        browser = FakeBrowser([page])
        with _patch_playwright(browser):
            results = await engine.capture(["https://example.com"], ["desktop"])

        assert len(results) == 1
        result = results[0]
        assert isinstance(result, CaptureSuccess)
        assert result.metadata.title == "Example Domain"
        assert result.metadata.description == "A description"
        assert result.metadata.viewport_size.width == 1440
        assert result.metadata.timestamp.endswith("Z")
        assert Path(result.screenshots.full).is_file()
        assert Path(result.screenshots.fold).is_file()
        assert Path(result.screenshots.full).parent == tmp_path / "shots"

        full_call, fold_call = page.screenshot.call_args_list
        assert full_call.kwargs["full_page"] is True
        assert fold_call.kwargs["full_page"] is False
        page.goto.assert_awaited_once_with("https://example.com", wait_until="networkidle",
                                           timeout=20000)
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_url_major_order_and_isolated_contexts(self, engine):
        pages = [_make_page(title=f"p{i}") for i in range(4)]
        browser = FakeBrowser(pages)
        with _patch_playwright(browser):
            results = await engine.capture(["https://a.example", "https://b.example"],
                                           ["desktop", "mobile"])

        assert [(r.url, r.viewport) for r in results] == [
            ("https://a.example", "desktop"),
            ("https://a.example", "mobile"),
            ("https://b.example", "desktop"),
            ("https://b.example", "mobile"),
        ]
        assert len(browser.contexts) == 4
        assert browser.contexts[1].kwargs["viewport"] == {"width": 375, "height": 812}
        for context in browser.contexts:
            context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_networkidle_timeout_falls_back(self, engine):
        page = _make_page(goto_side_effect=[PlaywrightTimeoutError("Timeout exceeded"), None])
        with _patch_playwright(FakeBrowser([page])):
            results = await engine.capture(["https://slow.example"], ["desktop"])

        assert isinstance(results[0], CaptureSuccess)
        calls = page.goto.await_args_list
        assert calls[0].kwargs["wait_until"] == "networkidle"
        assert calls[1].kwargs["wait_until"] == "domcontentloaded"
        page.wait_for_timeout.assert_any_await(engine.config.fallback_settle_ms)

    @pytest.mark.asyncio
    async def test_navigation_failure_becomes_marker(self, engine):
        bad = _make_page(goto_side_effect=Exception("net::ERR_NAME_NOT_RESOLVED"))
        good = _make_page()
        with _patch_playwright(FakeBrowser([bad, good])):
            results = await engine.capture(["https://nope.invalid", "https://example.com"],
                                           ["desktop"])

        assert isinstance(results[0], CaptureFailure)
        assert "ERR_NAME_NOT_RESOLVED" in results[0].error
        assert results[0].viewport == "desktop"
        assert isinstance(results[1], CaptureSuccess)

    @pytest.mark.asyncio
    async def test_screenshot_failure_becomes_marker(self, engine):
        page = _make_page(screenshot_error=RuntimeError("Target closed"))
        with _patch_playwright(FakeBrowser([page])):
            results = await engine.capture(["https://example.com"], ["mobile"])

        assert isinstance(results[0], CaptureFailure)
        assert "Screenshot failed" in results[0].error

    @pytest.mark.asyncio
    async def test_tracker_block_installed(self, engine):
        page = _make_page()
        with _patch_playwright(FakeBrowser([page])):
            await engine.capture(["https://example.com"], ["desktop"])
        page.route.assert_awaited_once()
        assert page.route.await_args.args[0] == "**/*"

    @pytest.mark.asyncio
    async def test_tracker_block_can_be_disabled(self, analysis_config, tmp_path):
        cfg = analysis_config.model_copy(update={"block_trackers": False})
        page = _make_page()
        with _patch_playwright(FakeBrowser([page])):
            await CaptureEngine(cfg, tmp_path / "shots").capture(["https://example.com"], ["desktop"])
        page.route.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_title_yields_empty_string(self, engine):
        page = _make_page()
        page.title = AsyncMock(side_effect=Exception("detached"))
        page.eval_on_selector = AsyncMock(return_value=None)
        with _patch_playwright(FakeBrowser([page])):
            results = await engine.capture(["https://example.com"], ["desktop"])
        assert results[0].metadata.title == ""
        assert results[0].metadata.description == ""


class TestConsentBanner:

    @pytest.mark.asyncio
    async def test_clicks_first_visible(self):
        hidden, visible = MagicMock(), MagicMock()
        hidden.first.is_visible = AsyncMock(return_value=False)
        visible.first.is_visible = AsyncMock(return_value=True)
        visible.first.click = AsyncMock()
        page = MagicMock()
        page.locator.side_effect = [hidden, visible]
        page.wait_for_timeout = AsyncMock()

        assert await dismiss_consent_banner(page, selectors=["#a", "#b"]) is True
        visible.first.click.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_errors_are_swallowed(self):
        broken = MagicMock()
        broken.first.is_visible = AsyncMock(side_effect=Exception("detached"))
        page = MagicMock()
        page.locator.return_value = broken

        assert await dismiss_consent_banner(page, selectors=["#a", "#b"]) is False

    @pytest.mark.asyncio
    async def test_no_banner(self):
        page = _make_page()
        assert await dismiss_consent_banner(page) is False


class TestBrowserUnavailable:

    @pytest.mark.asyncio
    async def test_launch_failure_is_fatal(self, engine):
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(side_effect=RuntimeError("Executable doesn't exist"))
        manager = MagicMock()
        manager.__aenter__ = AsyncMock(return_value=playwright)
        manager.__aexit__ = AsyncMock(return_value=False)

        with patch("competitor_ui.capture.engine.async_playwright", return_value=manager):
            with pytest.raises(FatalCaptureFailure, match=r"\(4 attempted\)") as exc_info:
                await engine.capture(["https://a.example", "https://b.example"],
                                     ["desktop", "mobile"])
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_driver_start_failure_is_fatal(self, engine):
        manager = MagicMock()
        manager.__aenter__ = AsyncMock(side_effect=Exception("driver not found"))
        manager.__aexit__ = AsyncMock(return_value=False)

        with patch("competitor_ui.capture.engine.async_playwright", return_value=manager):
            with pytest.raises(FatalCaptureFailure):
                await engine.capture(["https://example.com"], ["desktop"])

    @pytest.mark.asyncio
    async def test_driver_lost_mid_batch_marks_remaining_pairs(self, analysis_config, tmp_path):
        limiter = MagicMock()
        limiter.__aenter__ = AsyncMock(side_effect=[None, RuntimeError("Connection closed")])
        limiter.__aexit__ = AsyncMock(return_value=False)
        engine = CaptureEngine(analysis_config, tmp_path / "shots", limiter=limiter)
        browser = FakeBrowser([_make_page()])

        with _patch_playwright(browser):
            results = await engine.capture(["https://a.example", "https://b.example"],
                                           ["desktop", "mobile"])

        assert [(r.url, r.viewport) for r in results] == [
            ("https://a.example", "desktop"),
            ("https://a.example", "mobile"),
            ("https://b.example", "desktop"),
            ("https://b.example", "mobile"),
        ]
        assert isinstance(results[0], CaptureSuccess)
        assert all(isinstance(r, CaptureFailure) for r in results[1:])
        assert "Browser unavailable" in results[1].error
        browser.close.assert_awaited_once()
