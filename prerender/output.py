"""
Static prerendering: render a page served at some origin and write the
result to disk. The markup (snapshot template and rehydration script
included) is written byte-for-byte.
"""

import re
from pathlib import Path
from typing import Optional, Union

from prerender.engine import RenderTimeoutError, render
from prerender.handoff import verify_handoff
from prerender.logger import setup_logger
from prerender.models import RenderOptions, RenderStatus

logger = setup_logger("prerender.output")

TEMPLATE_SUFFIX = ".tpl.html"

_UNSAFE_CHARS = re.compile(r"[^-_.a-zA-Z0-9]")


def output_name(path: str) -> str:
    """
    Flat output file name for a URL path.
    'blog/post.tpl.html' -> 'blog_post.html', 'docs/' -> 'docs_index.html'
    """
    if not path or path.endswith("/"):
        path += "index.html"
    if path.endswith(TEMPLATE_SUFFIX):
        path = path[:-len(TEMPLATE_SUFFIX)] + ".html"
    return _UNSAFE_CHARS.sub("_", path)


def write_output(content: str, out_dir: Union[str, Path], name: str) -> Path:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / name
    # newline='' keeps line endings exactly as rendered
    with open(target, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    return target


async def prerender_page(
    origin: str,
    path: str,
    out_dir: Union[str, Path],
    options: Optional[RenderOptions] = None,
) -> Path:
    """
    Render origin + path and write it into out_dir.
    Raises RenderTimeoutError when the page never settled; nothing is written then.
    """
    options = options or RenderOptions()
    path = path.lstrip("/")
    url = origin.rstrip("/") + "/" + path
    result = await render(url, options)

    if result.status is RenderStatus.RENDER_TIMEOUT:
        raise RenderTimeoutError(
            f"{url} did not settle within {options.last_resort_timeout_ms}ms"
        )
    if result.status is RenderStatus.SUCCESS:
        verify_handoff(result.content, options.framework)

    target = write_output(result.content, out_dir, output_name(path))
    logger.info(f"[PRERENDER] Wrote {len(result.content)} chars to {target}", extra={"context": url})
    return target
