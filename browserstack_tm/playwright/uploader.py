"""
Playwright Result Uploader.

Uploads a Playwright JSON report to BrowserStack Test Management as a single
test run:

1. Parse the report.
2. Create a test run in ``in_progress`` state.
3. For every test, resolve (or create) the matching test case and submit a
   test result.
4. Mark the run ``failed`` if any submitted test failed or timed out,
   ``passed`` otherwise.

The pass is sequential and best-effort: an API error aborts it and leaves the
run ``in_progress`` on the server.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from browserstack_tm.api_client.client import BrowserStackClient
from browserstack_tm.api_client.models import (
    CreateTestCaseRequest,
    CreateTestResultRequest,
    CreateTestRunRequest,
    TestCase,
    TestResult,
    TestRun,
    UpdateTestRunRequest,
)
from browserstack_tm.playwright.report_parser import (
    PlaywrightTestResult,
    parse_playwright_report,
)
from browserstack_tm.playwright.status_mapper import (
    is_failure,
    map_to_browserstack_status,
)


@dataclass
class UploadOptions:
    """
    Options for one upload pass.

    Attributes:
        project_id: BrowserStack project receiving the run.
        test_run_name: Name of the run to create.
        test_run_description: Optional run description.
        test_plan_id: Optional test plan to link the run to.
        create_test_cases: Create test cases that do not exist yet. When
            False, tests without a matching case are skipped.
    """

    project_id: int
    test_run_name: str
    test_run_description: Optional[str] = None
    test_plan_id: Optional[int] = None
    create_test_cases: bool = False


@dataclass
class UploadOutcome:
    """
    Result of an upload pass.

    Attributes:
        test_run: The run, with its final status.
        results: Created test results, in submission order.
        warnings: Diagnostics collected during the pass.
        skipped_tests: Titles of tests that had no matching test case.
    """

    test_run: TestRun
    results: List[TestResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped_tests: List[str] = field(default_factory=list)

    @property
    def total_submitted(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.status == "passed")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == "failed")

    @property
    def other(self) -> int:
        return self.total_submitted - self.passed - self.failed

    @property
    def pass_rate(self) -> float:
        """Pass rate as a percentage of submitted results."""
        if self.total_submitted == 0:
            return 0.0
        return (self.passed / self.total_submitted) * 100

    def get_summary(self) -> Dict[str, Any]:
        """Summary statistics of the pass."""
        return {
            "test_run_id": self.test_run.id,
            "test_run_status": self.test_run.status,
            "total_submitted": self.total_submitted,
            "passed": self.passed,
            "failed": self.failed,
            "other": self.other,
            "skipped_tests": len(self.skipped_tests),
            "pass_rate": f"{self.pass_rate:.1f}%",
        }


def find_test_case(test_cases: List[TestCase], title: str) -> Optional[TestCase]:
    """
    Find the first test case whose title equals or contains ``title``.

    Listing order decides between several matches.
    """
    for test_case in test_cases:
        if test_case.title == title or title in test_case.title:
            return test_case
    return None


def _test_case_request(title: str, test_file: str) -> CreateTestCaseRequest:
    return CreateTestCaseRequest(
        title=title,
        description=f"Test from file: {test_file}",
        priority="medium",
        status="active",
        tags=[Path(test_file).stem],
    )


def _result_request(test_case_id: int, test: PlaywrightTestResult) -> CreateTestResultRequest:
    return CreateTestResultRequest(
        test_case_id=test_case_id,
        status=map_to_browserstack_status(test.status),
        execution_time=test.duration,
        error_message=test.error.message if test.error else None,
        stack_trace=test.error.stack if test.error else None,
    )


class _TestCaseResolver:
    """Looks up test cases against one listing fetched per upload pass."""

    def __init__(self, client: BrowserStackClient, project_id: int) -> None:
        self._client = client
        self._project_id = project_id
        self._cases: Optional[List[TestCase]] = None

    def _snapshot(self) -> List[TestCase]:
        if self._cases is None:
            self._cases = list(self._client.list_test_cases(self._project_id).data)
            logger.debug(f"Loaded {len(self._cases)} test cases for project {self._project_id}")
        return self._cases

    def find(self, title: str) -> Optional[TestCase]:
        return find_test_case(self._snapshot(), title)

    def find_or_create(self, title: str, test_file: str) -> TestCase:
        existing = self.find(title)
        if existing is not None:
            return existing

        created = self._client.create_test_case(
            self._project_id, _test_case_request(title, test_file)
        )
        # Later tests with the same title must reuse the new case
        self._snapshot().append(created)
        return created


def upload_playwright_results(
    client: BrowserStackClient,
    report_path: Union[str, Path],
    options: UploadOptions,
) -> UploadOutcome:
    """
    Upload a Playwright JSON report as a BrowserStack test run.

    Args:
        client: Configured BrowserStack client.
        report_path: Path to the Playwright JSON report.
        options: Project, run naming and test case creation settings.

    Returns:
        UploadOutcome with the finalized run and the submitted results.

    Raises:
        ReportNotFoundError: If the report file does not exist.
        json.JSONDecodeError: If the report is not valid JSON.
        BrowserStackAPIError: If any API call fails.
    """
    suites = parse_playwright_report(report_path)

    test_run = client.create_test_run(
        options.project_id,
        CreateTestRunRequest(
            name=options.test_run_name,
            description=options.test_run_description,
            test_plan_id=options.test_plan_id,
            status="in_progress",
        ),
    )

    resolver = _TestCaseResolver(client, options.project_id)
    outcome = UploadOutcome(test_run=test_run)
    has_failures = False

    for suite in suites:
        for test in suite.tests:
            if options.create_test_cases:
                test_case = resolver.find_or_create(test.title, suite.file)
            else:
                test_case = resolver.find(test.title)
                if test_case is None:
                    warning = (
                        f'Test case not found for "{test.title}". Skipping. '
                        f"Set create_test_cases=True to auto-create."
                    )
                    logger.warning(warning)
                    outcome.warnings.append(warning)
                    outcome.skipped_tests.append(test.title)
                    continue

            if is_failure(test.status):
                has_failures = True

            result = client.add_test_result(
                options.project_id,
                test_run.id,
                _result_request(test_case.id, test),
            )
            outcome.results.append(result)
            logger.debug(
                f"Result submitted: '{test.title}' -> case {test_case.id} ({result.status})"
            )

    final_status = "failed" if has_failures else "passed"
    client.update_test_run(
        options.project_id, test_run.id, UpdateTestRunRequest(status=final_status)
    )
    outcome.test_run = replace(test_run, status=final_status)

    logger.info(
        f"Test run {test_run.id} finalized as {final_status}: "
        f"{outcome.total_submitted} results, {len(outcome.skipped_tests)} skipped"
    )
    return outcome
