from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from prerender import config
from prerender.framework import FrameworkAdapter, MAVO


class RenderStatus(Enum):
    SUCCESS = "SUCCESS"
    FRAMEWORK_ABSENT = "FRAMEWORK_ABSENT"
    RENDER_TIMEOUT = "RENDER_TIMEOUT"


class SnapshotPolicy(Enum):
    """Which pristine clone wins when init-start fires more than once for one component."""
    FIRST = "first"
    LAST = "last"


@dataclass(frozen=True)
class RenderOptions:
    """
    Caller-supplied configuration for one render call.
    Defaults come from prerender.config (environment / .env).
    """
    headless: bool = config.HEADLESS
    poll_timeout_ms: int = config.POLL_TIMEOUT_MS
    last_resort_timeout_ms: int = config.LAST_RESORT_TIMEOUT_MS
    color_debug: bool = config.COLOR_DEBUG
    render_non_framework_pages: bool = config.RENDER_NON_FRAMEWORK_PAGES
    verbose: bool = config.VERBOSE
    snapshot_policy: SnapshotPolicy = SnapshotPolicy.LAST
    framework: FrameworkAdapter = field(default=MAVO)

    def __post_init__(self):
        if isinstance(self.snapshot_policy, str):
            # Allow "first"/"last" from env or query strings
            object.__setattr__(self, "snapshot_policy", SnapshotPolicy(self.snapshot_policy.lower()))
        for name in ("poll_timeout_ms", "last_resort_timeout_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.poll_timeout_ms >= self.last_resort_timeout_ms:
            raise ValueError(
                f"poll_timeout_ms ({self.poll_timeout_ms}) must be below "
                f"last_resort_timeout_ms ({self.last_resort_timeout_ms})"
            )


@dataclass(frozen=True)
class RenderResult:
    """
    Outcome of one render call. Immutable.
    Invariant: content is None exactly when the render timed out.
    """
    url: str
    status: RenderStatus
    content: Optional[str] = None
    elapsed_ms: int = 0
    # Time from the app-loaded signal to quiescence, and mutations seen in
    # the final observation pass. Only set on SUCCESS.
    settle_ms: Optional[int] = None
    mutations: Optional[int] = None

    @property
    def has_framework(self) -> bool:
        return self.status is RenderStatus.SUCCESS

    @property
    def timed_out(self) -> bool:
        return self.status is RenderStatus.RENDER_TIMEOUT
