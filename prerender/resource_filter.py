"""
Request filtering for the headless renderer.
Only traffic that can produce DOM (documents, scripts, XHR/fetch) is let through;
images, stylesheets, media and fonts only slow down convergence.
"""

from prerender.config import ALLOWED_RESOURCE_TYPES


def should_continue(resource_type: str) -> bool:
    return resource_type in ALLOWED_RESOURCE_TYPES


async def filter_request(route):
    """Playwright route handler. Decision is based on resource type only, never the URL."""
    if not should_continue(route.request.resource_type):
        return await route.abort()
    return await route.continue_()
