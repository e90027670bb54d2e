from prerender.models import RenderOptions, RenderResult, RenderStatus, SnapshotPolicy
from prerender.framework import FrameworkAdapter, MAVO
from prerender.engine import (
    render,
    render_sync,
    RenderError,
    NavigationError,
    BrowserSessionError,
    RenderTimeoutError,
)
from prerender.handoff import HandoffError, verify_handoff
from prerender.scripts import build_client_script, build_page_script
