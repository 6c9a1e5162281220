"""
Status mapping between Playwright and BrowserStack vocabularies.

Playwright reports use ``passed``, ``failed``, ``skipped`` and ``timedOut``
(plus a few aliases emitted by other reporters). BrowserStack test results
accept ``passed``, ``failed``, ``blocked`` and ``skipped``.
"""

from __future__ import annotations

from typing import Any, Dict

PLAYWRIGHT_STATUSES = ("passed", "failed", "skipped", "timedOut")

_PLAYWRIGHT_ALIASES: Dict[str, str] = {
    "passed": "passed",
    "ok": "passed",
    "failed": "failed",
    "skipped": "skipped",
    "skip": "skipped",
    "timedout": "timedOut",
    "timeout": "timedOut",
}

_BROWSERSTACK_STATUS: Dict[str, str] = {
    "passed": "passed",
    "failed": "failed",
    # BrowserStack has no timeout outcome
    "timedOut": "failed",
    "skipped": "skipped",
}


def map_playwright_status(status: Any) -> str:
    """
    Normalize a raw runner status to a Playwright status.

    Matching is case-insensitive. Missing, empty or unknown values map to
    ``"skipped"``.
    """
    if not status or not isinstance(status, str):
        return "skipped"
    return _PLAYWRIGHT_ALIASES.get(status.lower(), "skipped")


def map_to_browserstack_status(status: str) -> str:
    """Map a Playwright status to a BrowserStack test result status."""
    return _BROWSERSTACK_STATUS.get(status, "skipped")


def is_failure(status: str) -> bool:
    """Whether a Playwright status marks the run as failed."""
    return status in ("failed", "timedOut")
