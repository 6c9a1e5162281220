"""
Playwright Report Parser.

Reads a Playwright JSON report and flattens it into one PlaywrightTestSuite
per spec file. Three report layouts are understood:

1. A root array of specs, each with ``suites[].tests[].results[]``
   (``--reporter=json`` output of some wrappers).
2. An object with a ``specs`` array of the same spec shape.
3. An object with a flat ``suites`` array whose tests carry their own
   status and duration.

Anything else yields no suites. Order always follows the document.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from loguru import logger

from browserstack_tm.playwright.status_mapper import map_playwright_status

UNKNOWN_TEST_TITLE = "Unknown Test"
UNKNOWN_FILE = "unknown"

# Checked in order by find_playwright_report()
REPORT_CANDIDATES = (
    # Captain/RWX JSON output
    Path("tmp") / "playwright.json",
    Path("playwright-report") / "report.json",
    Path("test-results") / "report.json",
    Path("playwright-report.json"),
    Path("test-results.json"),
    Path("playwright-report") / "results.json",
    Path("test-results") / "results.json",
)


class ReportNotFoundError(FileNotFoundError):
    """Raised when the Playwright report file does not exist."""

    def __init__(self, report_path: Union[str, Path]) -> None:
        super().__init__(f"Playwright report file not found: {report_path}")
        self.report_path = str(report_path)


@dataclass(frozen=True)
class PlaywrightTestError:
    """Error details captured for a failed test."""

    message: str = ""
    stack: str = ""


@dataclass(frozen=True)
class PlaywrightTestResult:
    """
    Normalized result of one Playwright test.

    Attributes:
        title: Test title ("Unknown Test" when the report has none).
        status: One of "passed", "failed", "skipped", "timedOut".
        duration: Duration in milliseconds.
        error: Error details, if the report carried any.
        attachments: Raw attachment entries (name, path, contentType).
    """

    __test__ = False

    title: str
    status: str
    duration: int = 0
    error: Optional[PlaywrightTestError] = None
    attachments: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class PlaywrightTestSuite:
    """All tests of one spec file, in report order."""

    file: str
    tests: List[PlaywrightTestResult] = field(default_factory=list)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _duration(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _error(raw: Any, stack_keys: tuple = ("stack",)) -> Optional[PlaywrightTestError]:
    if raw is None or (not raw and not isinstance(raw, dict)):
        return None
    raw = _as_dict(raw)
    stack = next((raw[k] for k in stack_keys if raw.get(k)), "")
    return PlaywrightTestError(message=raw.get("message") or "", stack=stack)


def _first_result(test: Dict[str, Any]) -> Dict[str, Any]:
    results = _as_list(test.get("results"))
    return _as_dict(results[0]) if results else {}


def _first_or_last_result(test: Dict[str, Any]) -> Dict[str, Any]:
    # Retries append results; the first attempt wins unless it is null
    results = _as_list(test.get("results"))
    if not results:
        return {}
    first = results[0]
    return _as_dict(first if first is not None else results[-1])


def _parse_spec(
    spec: Dict[str, Any],
    pick_result: Callable[[Dict[str, Any]], Dict[str, Any]],
    lenient: bool,
) -> PlaywrightTestSuite:
    """
    Flatten ``suites[].tests[]`` of one spec into a suite.

    In lenient mode ``stackTrace`` is accepted for the error stack and
    attachments fall back to the test entry.
    """
    tests: List[PlaywrightTestResult] = []
    for suite in _as_list(spec.get("suites")):
        for test in _as_list(_as_dict(suite).get("tests")):
            test = _as_dict(test)
            result = pick_result(test)
            attachments = result.get("attachments")
            if attachments is None and lenient:
                attachments = test.get("attachments")
            tests.append(
                PlaywrightTestResult(
                    title=str(test.get("title") or UNKNOWN_TEST_TITLE),
                    status=map_playwright_status(result.get("status") or test.get("status")),
                    duration=_duration(result.get("duration") or test.get("duration") or 0),
                    error=_error(
                        result.get("error"),
                        ("stack", "stackTrace") if lenient else ("stack",),
                    ),
                    attachments=list(_as_list(attachments)),
                )
            )
    return PlaywrightTestSuite(file=spec.get("file") or UNKNOWN_FILE, tests=tests)


def _parse_flat_suite(suite: Dict[str, Any]) -> PlaywrightTestSuite:
    """Convert a suite whose tests carry status and duration directly."""
    tests: List[PlaywrightTestResult] = []
    for test in _as_list(suite.get("tests")):
        test = _as_dict(test)
        tests.append(
            PlaywrightTestResult(
                title=str(test.get("title") or test.get("name") or UNKNOWN_TEST_TITLE),
                status=map_playwright_status(test.get("status") or test.get("outcome")),
                duration=_duration(test.get("duration") or 0),
                error=_error(test.get("error")),
                attachments=list(_as_list(test.get("attachments"))),
            )
        )
    return PlaywrightTestSuite(file=suite.get("file") or UNKNOWN_FILE, tests=tests)


def parse_report_data(report: Any) -> List[PlaywrightTestSuite]:
    """
    Convert an already-decoded Playwright report into suites.

    Args:
        report: Decoded JSON value.

    Returns:
        Suites in document order; empty when the layout is not recognized.
    """
    if isinstance(report, list):
        return [
            _parse_spec(_as_dict(spec), _first_or_last_result, lenient=True)
            for spec in report
        ]

    if isinstance(report, dict) and isinstance(report.get("specs"), list):
        return [
            _parse_spec(_as_dict(spec), _first_result, lenient=False)
            for spec in report["specs"]
        ]

    if isinstance(report, dict) and isinstance(report.get("suites"), list):
        return [_parse_flat_suite(_as_dict(suite)) for suite in report["suites"]]

    logger.debug("Playwright report layout not recognized, no suites extracted")
    return []


def parse_playwright_report(report_path: Union[str, Path]) -> List[PlaywrightTestSuite]:
    """
    Parse a Playwright JSON report file.

    Args:
        report_path: Path to the JSON report.

    Returns:
        List of PlaywrightTestSuite, one per spec file, in document order.

    Raises:
        ReportNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    path = Path(report_path)
    if not path.is_file():
        raise ReportNotFoundError(report_path)

    report = json.loads(path.read_text(encoding="utf-8"))
    suites = parse_report_data(report)

    logger.info(
        f"Parsed Playwright report {path}: {len(suites)} suites, "
        f"{sum(len(s.tests) for s in suites)} tests"
    )
    return suites


def find_playwright_report(root_dir: Union[str, Path, None] = None) -> Optional[Path]:
    """
    Locate a Playwright JSON report in the usual output locations.

    Args:
        root_dir: Directory to search from (default: current working directory).

    Returns:
        Path of the first candidate that exists, or None.
    """
    root = Path(root_dir) if root_dir is not None else Path(os.getcwd())
    for candidate in REPORT_CANDIDATES:
        report_path = root / candidate
        if report_path.exists():
            logger.debug(f"Playwright report found: {report_path}")
            return report_path
    return None
