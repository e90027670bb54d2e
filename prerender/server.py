"""
On-demand SSR for documents served by an upstream origin.
Renders each requested page and answers with the prerendered markup.
Listening and asset proxying are left to whatever hosts the app.
"""

from typing import Optional

from flask import Flask, Response, request

from prerender.engine import BrowserSessionError, NavigationError, render_sync
from prerender.logger import setup_logger
from prerender.models import RenderOptions, RenderStatus

logger = setup_logger("prerender.server")


def _server_timing(elapsed_ms: int) -> str:
    # https://w3c.github.io/server-timing/
    return f'Prerender;dur={elapsed_ms};desc="Headless render time (ms)"'


def create_app(origin: str, options: Optional[RenderOptions] = None) -> Flask:
    app = Flask(__name__)
    app.config["SSR_ORIGIN"] = origin.rstrip("/") + "/"
    app.config["SSR_OPTIONS"] = options or RenderOptions()

    @app.route('/', defaults={'page': ''})
    @app.route('/<path:page>')
    def prerendered(page):
        """Render origin/page and map the outcome to an HTTP status."""
        url = app.config["SSR_ORIGIN"] + page
        if request.query_string:
            url += "?" + request.query_string.decode("utf-8")
        log = {"context": url}

        try:
            result = render_sync(url, app.config["SSR_OPTIONS"])
        except NavigationError as e:
            logger.error(f"[SERVER] Navigation failed: {e}", extra=log)
            return Response("Upstream page could not be loaded", status=502, mimetype="text/plain")
        except BrowserSessionError as e:
            logger.error(f"[SERVER] Browser session failed: {e}", extra=log)
            return Response("Prerender browser failed", status=500, mimetype="text/plain")

        if result.status is RenderStatus.RENDER_TIMEOUT:
            response = Response("Prerender timed out", status=504, mimetype="text/plain")
        else:
            response = Response(result.content, status=200, mimetype="text/html")

        response.headers["Server-Timing"] = _server_timing(result.elapsed_ms)
        response.headers["X-Prerender-Status"] = result.status.value
        return response

    return app
