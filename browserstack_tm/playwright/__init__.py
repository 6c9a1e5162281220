"""
Playwright Integration Module.

Converts Playwright JSON reports into BrowserStack Test Management data:
- Parsing the three known report layouts.
- Mapping Playwright statuses to BrowserStack statuses.
- Uploading a report as a Test Run with one Test Result per test.
"""

from browserstack_tm.playwright.report_parser import (
    PlaywrightTestError,
    PlaywrightTestResult,
    PlaywrightTestSuite,
    ReportNotFoundError,
    find_playwright_report,
    parse_playwright_report,
)
from browserstack_tm.playwright.status_mapper import (
    map_playwright_status,
    map_to_browserstack_status,
)
from browserstack_tm.playwright.uploader import (
    UploadOptions,
    UploadOutcome,
    upload_playwright_results,
)

__all__ = [
    "PlaywrightTestError",
    "PlaywrightTestResult",
    "PlaywrightTestSuite",
    "ReportNotFoundError",
    "find_playwright_report",
    "parse_playwright_report",
    "map_playwright_status",
    "map_to_browserstack_status",
    "UploadOptions",
    "UploadOutcome",
    "upload_playwright_results",
]
