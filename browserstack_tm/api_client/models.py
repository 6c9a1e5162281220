"""
BrowserStack Test Management Data Models.

Typed representations of the resources exposed by the Test Management API:
- Projects, Test Cases, Test Runs, Test Results and Test Plans.
- Request bodies for create/update calls.
- The paginated envelope returned by every list endpoint.

Field names follow the wire format (snake_case), so ``to_dict()`` output can
be posted as-is and ``from_dict()`` accepts raw response bodies.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

PRIORITIES = ("low", "medium", "high")
TEST_CASE_STATUSES = ("active", "inactive")
TEST_RUN_STATUSES = ("passed", "failed", "blocked", "skipped", "in_progress")
TEST_RESULT_STATUSES = ("passed", "failed", "blocked", "skipped")


class _RequestBody:
    """Mixin for request dataclasses: serialize without unset fields."""

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


@dataclass
class Pagination:
    """Pagination block of a list response."""

    page: int = 1
    per_page: int = 0
    total: int = 0
    total_pages: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pagination":
        return cls(
            page=data.get("page", 1),
            per_page=data.get("per_page", 0),
            total=data.get("total", 0),
            total_pages=data.get("total_pages", 0),
        )


@dataclass
class PaginatedResponse(Generic[T]):
    """
    Envelope returned by every list endpoint.

    Attributes:
        data: Items on the current page.
        pagination: Page information, absent when the server does not page.
    """

    data: List[T] = field(default_factory=list)
    pagination: Optional[Pagination] = None

    @classmethod
    def from_dict(
        cls,
        payload: Dict[str, Any],
        item_factory: Callable[[Dict[str, Any]], T],
    ) -> "PaginatedResponse[T]":
        pagination = payload.get("pagination")
        return cls(
            data=[item_factory(item) for item in payload.get("data") or []],
            pagination=Pagination.from_dict(pagination) if pagination else None,
        )

    def __iter__(self):
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@dataclass
class Project:
    """A Test Management project."""

    id: int
    name: str
    description: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class CreateProjectRequest(_RequestBody):
    name: str
    description: Optional[str] = None


@dataclass
class UpdateProjectRequest(_RequestBody):
    name: Optional[str] = None
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Test Cases
# ---------------------------------------------------------------------------


@dataclass
class TestCase:
    """
    A test case stored in a project.

    Attributes:
        id: Server-assigned identifier.
        project_id: Owning project.
        title: Test case title, used to match Playwright tests.
        description: Free-form description.
        priority: One of ``low``, ``medium``, ``high``.
        status: ``active`` or ``inactive``.
        tags: Labels attached to the case.
    """

    __test__ = False

    id: int
    project_id: int
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestCase":
        return cls(
            id=data["id"],
            project_id=data.get("project_id", 0),
            title=data.get("title", ""),
            description=data.get("description"),
            priority=data.get("priority"),
            status=data.get("status"),
            tags=list(data.get("tags") or []),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class CreateTestCaseRequest(_RequestBody):
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None


@dataclass
class UpdateTestCaseRequest(_RequestBody):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None


# ---------------------------------------------------------------------------
# Test Results
# ---------------------------------------------------------------------------


@dataclass
class TestResult:
    """
    Outcome of one test case within a test run.

    Attributes:
        id: Server-assigned identifier.
        test_case_id: Test case the result belongs to.
        test_run_id: Run the result was submitted to.
        status: ``passed``, ``failed``, ``blocked`` or ``skipped``.
        execution_time: Duration in milliseconds.
        error_message: Failure message, if any.
        stack_trace: Failure stack trace, if any.
        screenshots: Screenshot URLs or paths.
    """

    __test__ = False

    id: int
    test_case_id: int
    test_run_id: int
    status: str
    execution_time: Optional[int] = None
    error_message: Optional[str] = None
    stack_trace: Optional[str] = None
    screenshots: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestResult":
        return cls(
            id=data["id"],
            test_case_id=data.get("test_case_id", 0),
            test_run_id=data.get("test_run_id", 0),
            status=data.get("status", "skipped"),
            execution_time=data.get("execution_time"),
            error_message=data.get("error_message"),
            stack_trace=data.get("stack_trace"),
            screenshots=list(data.get("screenshots") or []),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class CreateTestResultRequest(_RequestBody):
    test_case_id: int
    status: str
    execution_time: Optional[int] = None
    error_message: Optional[str] = None
    stack_trace: Optional[str] = None
    screenshots: Optional[List[str]] = None


# ---------------------------------------------------------------------------
# Test Runs
# ---------------------------------------------------------------------------


@dataclass
class TestRun:
    """
    A test run grouping results for one execution.

    Attributes:
        id: Server-assigned identifier.
        project_id: Owning project.
        test_plan_id: Linked test plan, if any.
        name: Run name.
        description: Run description.
        status: One of ``passed``, ``failed``, ``blocked``, ``skipped``,
            ``in_progress``.
        test_results: Results embedded by the server, when it includes them.
    """

    __test__ = False

    id: int
    project_id: int
    name: str
    status: str = "in_progress"
    test_plan_id: Optional[int] = None
    description: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    test_results: List[TestResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestRun":
        return cls(
            id=data["id"],
            project_id=data.get("project_id", 0),
            name=data.get("name", ""),
            status=data.get("status", "in_progress"),
            test_plan_id=data.get("test_plan_id"),
            description=data.get("description"),
            started_at=data.get("started_at"),
            completed_at=data.get("completed_at"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            test_results=[
                TestResult.from_dict(r) for r in data.get("test_results") or []
            ],
        )


@dataclass
class CreateTestRunRequest(_RequestBody):
    name: str
    description: Optional[str] = None
    test_plan_id: Optional[int] = None
    status: Optional[str] = None


@dataclass
class UpdateTestRunRequest(_RequestBody):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


# ---------------------------------------------------------------------------
# Test Plans
# ---------------------------------------------------------------------------


@dataclass
class TestPlan:
    """A named set of test cases."""

    __test__ = False

    id: int
    project_id: int
    name: str
    description: Optional[str] = None
    test_case_ids: List[int] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestPlan":
        return cls(
            id=data["id"],
            project_id=data.get("project_id", 0),
            name=data.get("name", ""),
            description=data.get("description"),
            test_case_ids=list(data.get("test_case_ids") or []),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class CreateTestPlanRequest(_RequestBody):
    name: str
    description: Optional[str] = None
    test_case_ids: List[int] = field(default_factory=list)


@dataclass
class UpdateTestPlanRequest(_RequestBody):
    name: Optional[str] = None
    description: Optional[str] = None
    test_case_ids: Optional[List[int]] = None
