"""
Configuration for the headless prerenderer.
Defines render defaults, browser launch settings and the request whitelist.
Values can be overridden through the environment or a .env file at the project root.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env before any constant is read
load_dotenv(Path(__file__).resolve().parents[1] / '.env')


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# === RENDER DEFAULTS ===

# Run Chromium without a window
HEADLESS = _env_flag("SSR_HEADLESS", True)

# Quiet window (ms) with zero DOM mutations before a page counts as rendered.
# Also baked into the rehydration script for real clients.
POLL_TIMEOUT_MS = int(os.getenv("SSR_POLL_TIMEOUT_MS", 500))

# Absolute ceiling (ms) for one render, navigation included
LAST_RESORT_TIMEOUT_MS = int(os.getenv("SSR_LAST_RESORT_TIMEOUT_MS", 30000))

# Color elements by rehydration phase in the output
COLOR_DEBUG = _env_flag("SSR_COLOR_DEBUG", False)

# Return the rendered DOM even when the page has no framework
RENDER_NON_FRAMEWORK_PAGES = _env_flag("SSR_RENDER_NON_FRAMEWORK", False)

# Forward page console output to the log
VERBOSE = _env_flag("SSR_VERBOSE", False)

# Optional log file for the root prerender logger
LOG_FILE = os.getenv("SSR_LOG_FILE") or None

LOG_LEVEL = os.getenv("SSR_LOG_LEVEL", "INFO").upper()


# === BROWSER SETTINGS ===

USER_AGENT = os.getenv(
    "SSR_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36",
)

BROWSER_ARGS = [
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
]

# Resource types that can produce DOM. Everything else (images, stylesheets,
# media, fonts, ...) is aborted.
ALLOWED_RESOURCE_TYPES = frozenset(["document", "script", "xhr", "fetch"])
