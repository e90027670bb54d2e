"""
Render orchestration: one isolated headless Chromium per call.

FLOW: launch browser -> expose completion callback -> install request filter
and page instrumentation -> navigate (networkidle) -> keep raw body ->
race completion against the last-resort timeout -> close browser ->
return rendered markup, raw fallback, or a timeout outcome.
"""

import asyncio
import time
from typing import Optional

from playwright.async_api import (
    async_playwright,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from prerender.config import BROWSER_ARGS, USER_AGENT
from prerender.logger import setup_logger
from prerender.models import RenderOptions, RenderResult, RenderStatus
from prerender.resource_filter import filter_request
from prerender.scripts import CALLBACK_NAME, build_page_script

logger = setup_logger("prerender.engine")


class RenderError(Exception):
    """Base rendering exception."""
    pass


class NavigationError(RenderError):
    """Raised when the target URL fails to load. No fallback content exists."""
    pass


class BrowserSessionError(RenderError):
    """Raised when the browser fails to start or crashes mid-render."""
    pass


class RenderTimeoutError(RenderError):
    """Raised by callers that need the timeout outcome as an exception."""
    pass


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


async def render(url: str, options: Optional[RenderOptions] = None) -> RenderResult:
    """
    Render a page until its DOM is quiescent and return the markup.

    Returns a RenderResult with status SUCCESS, FRAMEWORK_ABSENT (raw body
    unless render_non_framework_pages) or RENDER_TIMEOUT (content None).
    Raises NavigationError / BrowserSessionError on hard failures.
    """
    options = options or RenderOptions()
    log = {"context": url}
    start = time.monotonic()
    loop = asyncio.get_running_loop()
    # The budget covers navigation as well
    deadline = loop.time() + options.last_resort_timeout_ms / 1000

    loaded = None

    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=options.headless, args=BROWSER_ARGS)
        except PlaywrightError as e:
            raise BrowserSessionError(f"Failed to launch browser: {e}") from e

        try:
            try:
                context = await browser.new_context(user_agent=USER_AGENT)
                page = await context.new_page()
            except PlaywrightError as e:
                raise BrowserSessionError(f"Failed to open page: {e}") from e
            loaded = loop.create_future()

            if options.verbose:
                page.on("console", lambda msg: logger.info(f"[PAGE] LOG: {msg.text}", extra=log))
            page.on("pageerror", lambda err: logger.warning(f"[PAGE] ERR: {err}", extra=log))

            def session_lost(reason):
                def handler(*_args):
                    if not loaded.done():
                        loaded.set_exception(BrowserSessionError(f"{reason} while rendering {url}"))
                return handler
            page.on("crash", session_lost("Page crashed"))
            page.on("close", session_lost("Page closed"))
            browser.on("disconnected", session_lost("Browser disconnected"))

            async def on_load(source, has_framework, stats=None):
                # Child frames run the instrumentation too; only the top document counts
                if source.get("frame") is not page.main_frame or loaded.done():
                    return
                try:
                    content = await page.content()
                except PlaywrightError as e:
                    if not loaded.done():
                        loaded.set_exception(BrowserSessionError(f"Could not serialize DOM: {e}"))
                    return
                if not loaded.done():
                    loaded.set_result((content, bool(has_framework), stats or {}))

            # Order matters: the instrumentation calls the binding,
            # and both must exist before the first document loads.
            await page.expose_binding(CALLBACK_NAME, on_load)
            await page.route("**/*", filter_request)
            await page.add_init_script(script=build_page_script(options))

            try:
                response = await page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=options.last_resort_timeout_ms,
                )
            except PlaywrightTimeoutError:
                # The whole budget went into navigation
                elapsed = _elapsed_ms(start)
                logger.info(f"[SSR] Headless timed out during navigation after {elapsed}ms", extra=log)
                return RenderResult(url=url, status=RenderStatus.RENDER_TIMEOUT, elapsed_ms=elapsed)
            except PlaywrightError as e:
                raise NavigationError(f"Failed to load {url}: {e}") from e
            if response is None:
                raise NavigationError(f"No response for {url}")
            try:
                raw_content = await response.text()
            except PlaywrightError as e:
                raise NavigationError(f"Could not read response body of {url}: {e}") from e

            remaining = max(0.0, deadline - loop.time())
            try:
                content, has_framework, stats = await asyncio.wait_for(loaded, timeout=remaining)
            except asyncio.TimeoutError:
                elapsed = _elapsed_ms(start)
                logger.info(f"[SSR] Headless timed out waiting for render after {elapsed}ms", extra=log)
                return RenderResult(url=url, status=RenderStatus.RENDER_TIMEOUT, elapsed_ms=elapsed)
        finally:
            if loaded is not None:
                if loaded.done() and not loaded.cancelled():
                    # mark a pending session error as retrieved
                    loaded.exception()
                else:
                    loaded.cancel()
            try:
                await browser.close()
            except PlaywrightError as e:
                logger.error(f"[SSR] Browser close failed: {e}", extra=log)

    elapsed = _elapsed_ms(start)
    if has_framework:
        logger.info(
            f"[SSR] Rendered page (with framework) to {len(content)} chars in {elapsed}ms, "
            f"settled {stats.get('settleMs')}ms after app load",
            extra=log,
        )
        return RenderResult(
            url=url,
            status=RenderStatus.SUCCESS,
            content=content,
            elapsed_ms=elapsed,
            settle_ms=stats.get("settleMs"),
            mutations=stats.get("mutations"),
        )

    if options.render_non_framework_pages:
        logger.info(f"[SSR] Rendered page (without framework) to {len(content)} chars in {elapsed}ms", extra=log)
        return RenderResult(url=url, status=RenderStatus.FRAMEWORK_ABSENT, content=content, elapsed_ms=elapsed)

    logger.info(f"[SSR] No framework detected; returned raw page with {len(raw_content)} chars in {elapsed}ms", extra=log)
    return RenderResult(url=url, status=RenderStatus.FRAMEWORK_ABSENT, content=raw_content, elapsed_ms=elapsed)


def render_sync(url: str, options: Optional[RenderOptions] = None) -> RenderResult:
    """
    Blocking wrapper for threaded callers (e.g. Flask workers).
    Runs the render on a private event loop.
    """
    return asyncio.run(render(url, options))
