"""
Root conftest.py — Shared Pytest fixtures.

Provides fixtures for:
- Writing Playwright JSON reports to a temporary directory.
- An in-memory BrowserStack client recording every call, so the uploader
  can be exercised without HTTP.
"""

from __future__ import annotations

import itertools
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from browserstack_tm.api_client.client import BrowserStackAPIError, _payload
from browserstack_tm.api_client.models import (
    PaginatedResponse,
    Pagination,
    TestCase,
    TestResult,
    TestRun,
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeBrowserStackClient:
    """
    In-memory stand-in for BrowserStackClient.

    Keeps test cases, runs and results in lists and records each call as
    ``(method_name, args...)`` in ``calls``.
    """

    def __init__(self, test_cases: Optional[List[TestCase]] = None) -> None:
        self.test_cases: List[TestCase] = list(test_cases or [])
        self.test_runs: Dict[int, TestRun] = {}
        self.results: List[TestResult] = []
        self.calls: List[Tuple[Any, ...]] = []
        self.fail_on: Optional[str] = None
        self._ids = itertools.count(1000)

    def _check(self, method: str) -> None:
        if self.fail_on == method:
            raise BrowserStackAPIError("BrowserStack API Error: Internal error", status_code=500)

    def list_test_cases(self, project_id: int) -> PaginatedResponse[TestCase]:
        self.calls.append(("list_test_cases", project_id))
        self._check("list_test_cases")
        return PaginatedResponse(
            data=list(self.test_cases),
            pagination=Pagination(page=1, per_page=100, total=len(self.test_cases), total_pages=1),
        )

    def create_test_case(self, project_id: int, data: Any) -> TestCase:
        body = _payload(data)
        self.calls.append(("create_test_case", project_id, body))
        self._check("create_test_case")
        test_case = TestCase(id=next(self._ids), project_id=project_id, **body)
        self.test_cases.append(test_case)
        return test_case

    def create_test_run(self, project_id: int, data: Any) -> TestRun:
        body = _payload(data)
        self.calls.append(("create_test_run", project_id, body))
        self._check("create_test_run")
        test_run = TestRun(id=next(self._ids), project_id=project_id, **body)
        self.test_runs[test_run.id] = test_run
        return test_run

    def add_test_result(self, project_id: int, test_run_id: int, data: Any) -> TestResult:
        body = _payload(data)
        self.calls.append(("add_test_result", project_id, test_run_id, body))
        self._check("add_test_result")
        result = TestResult(id=next(self._ids), test_run_id=test_run_id, **body)
        self.results.append(result)
        return result

    def update_test_run(self, project_id: int, test_run_id: int, data: Any) -> TestRun:
        body = _payload(data)
        self.calls.append(("update_test_run", project_id, test_run_id, body))
        self._check("update_test_run")
        test_run = self.test_runs[test_run_id]
        for key, value in body.items():
            setattr(test_run, key, value)
        return test_run

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_client() -> FakeBrowserStackClient:
    """A fresh in-memory client with no test cases."""
    return FakeBrowserStackClient()


@pytest.fixture
def write_report(tmp_path: Path) -> Callable[[Any], Path]:
    """Return a helper that dumps a report object to a JSON file."""

    def _write(report: Any, name: str = "report.json") -> Path:
        report_path = tmp_path / name
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(json.dumps(report), encoding="utf-8")
        return report_path

    return _write

