"""
BrowserStack API Client Module.

Provides access to the BrowserStack Test Management REST API for:
- Projects, Test Cases, Test Runs and Test Plans (CRUD).
- Submitting and listing Test Results of a Test Run.
"""

from browserstack_tm.api_client.client import (
    DEFAULT_BASE_URL,
    BrowserStackAPIError,
    BrowserStackClient,
    BrowserStackTransportError,
    ClientConfig,
)
from browserstack_tm.api_client.models import (
    CreateProjectRequest,
    CreateTestCaseRequest,
    CreateTestPlanRequest,
    CreateTestResultRequest,
    CreateTestRunRequest,
    PaginatedResponse,
    Pagination,
    Project,
    TestCase,
    TestPlan,
    TestResult,
    TestRun,
    UpdateProjectRequest,
    UpdateTestCaseRequest,
    UpdateTestPlanRequest,
    UpdateTestRunRequest,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "BrowserStackAPIError",
    "BrowserStackClient",
    "BrowserStackTransportError",
    "ClientConfig",
    "CreateProjectRequest",
    "CreateTestCaseRequest",
    "CreateTestPlanRequest",
    "CreateTestResultRequest",
    "CreateTestRunRequest",
    "PaginatedResponse",
    "Pagination",
    "Project",
    "TestCase",
    "TestPlan",
    "TestResult",
    "TestRun",
    "UpdateProjectRequest",
    "UpdateTestCaseRequest",
    "UpdateTestPlanRequest",
    "UpdateTestRunRequest",
]
