"""
BrowserStack Test Management REST API Client.

Provides a dedicated client for the BrowserStack Test Management API:
- Basic authentication with a username / access key pair.
- CRUD operations for projects, test cases, test runs and test plans.
- Submitting and listing test results of a test run.

Every call is synchronous and issued once; failures surface as
BrowserStackAPIError (server responded) or BrowserStackTransportError
(no response received).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, Union

import requests
from loguru import logger

from browserstack_tm.api_client.models import (
    CreateProjectRequest,
    CreateTestCaseRequest,
    CreateTestPlanRequest,
    CreateTestResultRequest,
    CreateTestRunRequest,
    PaginatedResponse,
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

DEFAULT_BASE_URL = "https://api.browserstack.com/test-management/v1"
SERVICE_NAME = "BrowserStack"

T = TypeVar("T")


class BrowserStackAPIError(Exception):
    """Raised when a BrowserStack API call fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors


class BrowserStackTransportError(BrowserStackAPIError):
    """Raised when no response was received (connection failure, timeout)."""


@dataclass
class ClientConfig:
    """Configuration for the BrowserStack API client."""

    username: str
    access_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_sec: int = 30
    verify_ssl: bool = True


def _payload(data: Any) -> Dict[str, Any]:
    """Turn a request dataclass or a plain mapping into a JSON body."""
    if hasattr(data, "to_dict"):
        return data.to_dict()
    return {k: v for k, v in dict(data).items() if v is not None}


def _format_api_error(response: requests.Response, fallback: str) -> BrowserStackAPIError:
    """Build the error for a response carrying a non-2xx status."""
    try:
        body = response.json()
    except ValueError:
        body = None

    message = fallback
    errors = None
    if isinstance(body, dict):
        message = body.get("message") or fallback
        errors = body.get("errors")

    text = f"{SERVICE_NAME} API Error: {message}"
    if errors is not None:
        text += f" - {json.dumps(errors)}"
    return BrowserStackAPIError(text, status_code=response.status_code, errors=errors)


class BrowserStackClient:
    """
    Client for the BrowserStack Test Management REST API.

    Usage::

        client = BrowserStackClient(username="user", access_key="key")
        projects = client.list_projects()
        run = client.create_test_run(
            projects.data[0].id,
            CreateTestRunRequest(name="Nightly", status="in_progress"),
        )
    """

    # Resource paths, relative to the base URL
    ENDPOINTS = {
        "projects": "/projects",
        "project": "/projects/{project_id}",
        "test_cases": "/projects/{project_id}/test-cases",
        "test_case": "/projects/{project_id}/test-cases/{test_case_id}",
        "test_runs": "/projects/{project_id}/test-runs",
        "test_run": "/projects/{project_id}/test-runs/{test_run_id}",
        "test_results": "/projects/{project_id}/test-runs/{test_run_id}/test-results",
        "test_plans": "/projects/{project_id}/test-plans",
        "test_plan": "/projects/{project_id}/test-plans/{test_plan_id}",
    }

    def __init__(
        self,
        username: str = "",
        access_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        timeout_sec: int = 30,
        verify_ssl: bool = True,
        config: Optional[ClientConfig] = None,
    ) -> None:
        """
        Initialize the BrowserStack client.

        Args:
            username: BrowserStack username.
            access_key: BrowserStack access key.
            base_url: API base URL (defaults to the production endpoint).
            timeout_sec: Request timeout in seconds.
            verify_ssl: Whether to verify SSL certificates.
            config: Optional ClientConfig dataclass (overrides individual params).
        """
        if config is None:
            config = ClientConfig(
                username=username,
                access_key=access_key,
                base_url=base_url,
                timeout_sec=timeout_sec,
                verify_ssl=verify_ssl,
            )
        self._config = replace(config, base_url=(config.base_url or DEFAULT_BASE_URL).rstrip("/"))

        self._session: Optional[requests.Session] = None
        logger.info(
            f"BrowserStackClient initialized — user={self._config.username}, "
            f"url={self._config.base_url}"
        )

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def username(self) -> str:
        return self._config.username

    def _get_session(self) -> requests.Session:
        """Get or create an HTTP session with basic auth and JSON headers."""
        if self._session is None:
            self._session = requests.Session()
            self._session.verify = self._config.verify_ssl
            self._session.auth = (self._config.username, self._config.access_key)
            self._session.headers.update({
                "Content-Type": "application/json",
                "Accept": "application/json",
            })
        return self._session

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """
        Make an authenticated API request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            endpoint: API endpoint path.
            **kwargs: Additional arguments for requests (json, params).

        Returns:
            Parsed JSON response, or None for an empty body.

        Raises:
            BrowserStackAPIError: If the server answered with an error status
                or a successful response carries a body that is not JSON.
            BrowserStackTransportError: If no response was received.
        """
        session = self._get_session()
        url = f"{self._config.base_url}{endpoint}"
        logger.debug(f"BrowserStack API {method} {url}")

        try:
            response = session.request(
                method=method,
                url=url,
                timeout=self._config.timeout_sec,
                **kwargs,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            if e.response is None:
                raise BrowserStackTransportError(str(e) or "Unknown error occurred") from e
            error = _format_api_error(e.response, str(e))
            logger.error(f"{error} (status={error.status_code})")
            raise error from e
        except requests.exceptions.RequestException as e:
            logger.error(f"BrowserStack API transport error: {e}")
            raise BrowserStackTransportError(str(e) or "Unknown error occurred") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"BrowserStack API returned a non-JSON body for {method} {url}")
            raise BrowserStackAPIError(
                f"{SERVICE_NAME} API Error: Invalid JSON in response body",
                status_code=response.status_code,
            ) from e

    def _resource(
        self, factory: Callable[[Dict[str, Any]], T], method: str, endpoint: str, **kwargs: Any
    ) -> T:
        """Make a request that must answer with a single resource object."""
        body = self._request(method, endpoint, **kwargs)
        if not isinstance(body, dict):
            raise BrowserStackAPIError(
                f"{SERVICE_NAME} API Error: Expected a resource in response to {method} {endpoint}"
            )
        return factory(body)

    def _optional_resource(
        self, factory: Callable[[Dict[str, Any]], T], method: str, endpoint: str, **kwargs: Any
    ) -> Optional[T]:
        """Make a request that may answer without a body (e.g. 204 No Content)."""
        body = self._request(method, endpoint, **kwargs)
        if body is None:
            return None
        if not isinstance(body, dict):
            raise BrowserStackAPIError(
                f"{SERVICE_NAME} API Error: Expected a resource in response to {method} {endpoint}"
            )
        return factory(body)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self) -> PaginatedResponse[Project]:
        """List all projects."""
        response = self._request("GET", self.ENDPOINTS["projects"])
        return PaginatedResponse.from_dict(response or {}, Project.from_dict)

    def get_project(self, project_id: int) -> Project:
        """Get a specific project by ID."""
        endpoint = self.ENDPOINTS["project"].format(project_id=project_id)
        return self._resource(Project.from_dict, "GET", endpoint)

    def create_project(self, data: Union[CreateProjectRequest, Mapping[str, Any]]) -> Project:
        """Create a new project."""
        project = self._resource(
            Project.from_dict, "POST", self.ENDPOINTS["projects"], json=_payload(data)
        )
        logger.info(f"Project created: {project.id} ({project.name})")
        return project

    def update_project(
        self,
        project_id: int,
        data: Union[UpdateProjectRequest, Mapping[str, Any]],
    ) -> Optional[Project]:
        """Update a project. Returns None when the server answers without a body."""
        endpoint = self.ENDPOINTS["project"].format(project_id=project_id)
        return self._optional_resource(Project.from_dict, "PUT", endpoint, json=_payload(data))

    def delete_project(self, project_id: int) -> None:
        """Delete a project."""
        endpoint = self.ENDPOINTS["project"].format(project_id=project_id)
        self._request("DELETE", endpoint)
        logger.info(f"Project deleted: {project_id}")

    # ------------------------------------------------------------------
    # Test Cases
    # ------------------------------------------------------------------

    def list_test_cases(self, project_id: int) -> PaginatedResponse[TestCase]:
        """List test cases for a project."""
        endpoint = self.ENDPOINTS["test_cases"].format(project_id=project_id)
        response = self._request("GET", endpoint)
        return PaginatedResponse.from_dict(response or {}, TestCase.from_dict)

    def get_test_case(self, project_id: int, test_case_id: int) -> TestCase:
        """Get a specific test case by ID."""
        endpoint = self.ENDPOINTS["test_case"].format(
            project_id=project_id, test_case_id=test_case_id
        )
        return self._resource(TestCase.from_dict, "GET", endpoint)

    def create_test_case(
        self,
        project_id: int,
        data: Union[CreateTestCaseRequest, Mapping[str, Any]],
    ) -> TestCase:
        """Create a new test case."""
        endpoint = self.ENDPOINTS["test_cases"].format(project_id=project_id)
        test_case = self._resource(TestCase.from_dict, "POST", endpoint, json=_payload(data))
        logger.info(f"Test case created: {test_case.id} ('{test_case.title}')")
        return test_case

    def update_test_case(
        self,
        project_id: int,
        test_case_id: int,
        data: Union[UpdateTestCaseRequest, Mapping[str, Any]],
    ) -> Optional[TestCase]:
        """Update a test case. Returns None when the server answers without a body."""
        endpoint = self.ENDPOINTS["test_case"].format(
            project_id=project_id, test_case_id=test_case_id
        )
        return self._optional_resource(TestCase.from_dict, "PUT", endpoint, json=_payload(data))

    def delete_test_case(self, project_id: int, test_case_id: int) -> None:
        """Delete a test case."""
        endpoint = self.ENDPOINTS["test_case"].format(
            project_id=project_id, test_case_id=test_case_id
        )
        self._request("DELETE", endpoint)

    # ------------------------------------------------------------------
    # Test Runs
    # ------------------------------------------------------------------

    def list_test_runs(self, project_id: int) -> PaginatedResponse[TestRun]:
        """List test runs for a project."""
        endpoint = self.ENDPOINTS["test_runs"].format(project_id=project_id)
        response = self._request("GET", endpoint)
        return PaginatedResponse.from_dict(response or {}, TestRun.from_dict)

    def get_test_run(self, project_id: int, test_run_id: int) -> TestRun:
        """Get a specific test run by ID."""
        endpoint = self.ENDPOINTS["test_run"].format(
            project_id=project_id, test_run_id=test_run_id
        )
        return self._resource(TestRun.from_dict, "GET", endpoint)

    def create_test_run(
        self,
        project_id: int,
        data: Union[CreateTestRunRequest, Mapping[str, Any]],
    ) -> TestRun:
        """Create a new test run."""
        endpoint = self.ENDPOINTS["test_runs"].format(project_id=project_id)
        test_run = self._resource(TestRun.from_dict, "POST", endpoint, json=_payload(data))
        logger.info(f"Test run created: {test_run.id} ('{test_run.name}')")
        return test_run

    def update_test_run(
        self,
        project_id: int,
        test_run_id: int,
        data: Union[UpdateTestRunRequest, Mapping[str, Any]],
    ) -> Optional[TestRun]:
        """Update a test run. Returns None when the server answers without a body."""
        endpoint = self.ENDPOINTS["test_run"].format(
            project_id=project_id, test_run_id=test_run_id
        )
        return self._optional_resource(TestRun.from_dict, "PUT", endpoint, json=_payload(data))

    def delete_test_run(self, project_id: int, test_run_id: int) -> None:
        """Delete a test run."""
        endpoint = self.ENDPOINTS["test_run"].format(
            project_id=project_id, test_run_id=test_run_id
        )
        self._request("DELETE", endpoint)

    # ------------------------------------------------------------------
    # Test Results
    # ------------------------------------------------------------------

    def add_test_result(
        self,
        project_id: int,
        test_run_id: int,
        data: Union[CreateTestResultRequest, Mapping[str, Any]],
    ) -> TestResult:
        """Add a test result to a test run."""
        endpoint = self.ENDPOINTS["test_results"].format(
            project_id=project_id, test_run_id=test_run_id
        )
        return self._resource(TestResult.from_dict, "POST", endpoint, json=_payload(data))

    def list_test_results(
        self, project_id: int, test_run_id: int
    ) -> PaginatedResponse[TestResult]:
        """List test results of a test run."""
        endpoint = self.ENDPOINTS["test_results"].format(
            project_id=project_id, test_run_id=test_run_id
        )
        response = self._request("GET", endpoint)
        return PaginatedResponse.from_dict(response or {}, TestResult.from_dict)

    # ------------------------------------------------------------------
    # Test Plans
    # ------------------------------------------------------------------

    def list_test_plans(self, project_id: int) -> PaginatedResponse[TestPlan]:
        """List test plans for a project."""
        endpoint = self.ENDPOINTS["test_plans"].format(project_id=project_id)
        response = self._request("GET", endpoint)
        return PaginatedResponse.from_dict(response or {}, TestPlan.from_dict)

    def get_test_plan(self, project_id: int, test_plan_id: int) -> TestPlan:
        """Get a specific test plan by ID."""
        endpoint = self.ENDPOINTS["test_plan"].format(
            project_id=project_id, test_plan_id=test_plan_id
        )
        return self._resource(TestPlan.from_dict, "GET", endpoint)

    def create_test_plan(
        self,
        project_id: int,
        data: Union[CreateTestPlanRequest, Mapping[str, Any]],
    ) -> TestPlan:
        """Create a new test plan."""
        endpoint = self.ENDPOINTS["test_plans"].format(project_id=project_id)
        return self._resource(TestPlan.from_dict, "POST", endpoint, json=_payload(data))

    def update_test_plan(
        self,
        project_id: int,
        test_plan_id: int,
        data: Union[UpdateTestPlanRequest, Mapping[str, Any]],
    ) -> Optional[TestPlan]:
        """Update a test plan. Returns None when the server answers without a body."""
        endpoint = self.ENDPOINTS["test_plan"].format(
            project_id=project_id, test_plan_id=test_plan_id
        )
        return self._optional_resource(TestPlan.from_dict, "PUT", endpoint, json=_payload(data))

    def delete_test_plan(self, project_id: int, test_plan_id: int) -> None:
        """Delete a test plan."""
        endpoint = self.ENDPOINTS["test_plan"].format(
            project_id=project_id, test_plan_id=test_plan_id
        )
        self._request("DELETE", endpoint)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None
            logger.debug("BrowserStack client session closed")

    def __enter__(self) -> "BrowserStackClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
