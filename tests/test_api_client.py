"""
Unit Tests for the BrowserStack API Client Module.

Covers:
- BrowserStackClient: configuration, session setup, endpoint paths
  (HTTP session mocked).
- Error surfacing for API errors and transport failures.
- Model (de)serialization for request bodies and paginated responses.
"""

from __future__ import annotations

import json
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
import requests

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
    TestCase,
    TestRun,
    UpdateTestRunRequest,
)


def _response(status_code: int = 200, body: Optional[Any] = None) -> requests.Response:
    """Build a real requests.Response carrying a JSON body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = "https://api.example.com/test-management/v1/endpoint"
    response._content = json.dumps(body).encode("utf-8") if body is not None else b""
    return response


@pytest.fixture
def client() -> BrowserStackClient:
    """Client with a mocked HTTP session."""
    client = BrowserStackClient(username="test-user", access_key="test-key")
    client._session = MagicMock()
    return client


def _last_call(client: BrowserStackClient) -> dict:
    return client._session.request.call_args.kwargs


PROJECT = {
    "id": 1,
    "name": "Test Project",
    "description": "Test Description",
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
}

TEST_CASE = {
    "id": 11,
    "project_id": 1,
    "title": "Login works",
    "priority": "medium",
    "status": "active",
    "tags": ["login"],
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
}

TEST_RUN = {
    "id": 21,
    "project_id": 1,
    "name": "Nightly",
    "status": "in_progress",
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
}


# ---------------------------------------------------------------------------
# Configuration Tests
# ---------------------------------------------------------------------------


class TestClientConfiguration:
    """Tests for client construction."""

    def test_default_base_url(self) -> None:
        """Test that the production endpoint is used by default."""
        client = BrowserStackClient(username="test-user", access_key="test-key")
        assert client.base_url == DEFAULT_BASE_URL
        assert client.username == "test-user"

    def test_custom_base_url(self) -> None:
        """Test that a custom base URL is used and its trailing slash stripped."""
        client = BrowserStackClient(
            username="test-user",
            access_key="test-key",
            base_url="https://custom-api.example.com/",
        )
        assert client.base_url == "https://custom-api.example.com"

    def test_init_with_config(self) -> None:
        """Test client initialization with a ClientConfig dataclass."""
        config = ClientConfig(username="u", access_key="k", timeout_sec=5)
        client = BrowserStackClient(config=config)
        assert client.base_url == DEFAULT_BASE_URL
        assert client._config.timeout_sec == 5

    def test_config_not_mutated(self) -> None:
        """Test that the caller's ClientConfig keeps its own base URL."""
        config = ClientConfig(username="u", access_key="k", base_url="https://tm.example.com/v1/")
        client = BrowserStackClient(config=config)

        assert client.base_url == "https://tm.example.com/v1"
        assert config.base_url == "https://tm.example.com/v1/"

    def test_session_uses_basic_auth(self) -> None:
        """Test that the session carries the credential pair and JSON headers."""
        client = BrowserStackClient(username="test-user", access_key="test-key")
        session = client._get_session()

        assert session.auth == ("test-user", "test-key")
        assert session.headers["Content-Type"] == "application/json"
        assert client._get_session() is session
        client.close()
        assert client._session is None

    def test_context_manager_closes_session(self) -> None:
        """Test that leaving the context closes the session."""
        with BrowserStackClient(username="u", access_key="k") as client:
            client._get_session()
        assert client._session is None


# ---------------------------------------------------------------------------
# Endpoint Tests
# ---------------------------------------------------------------------------


class TestProjects:
    """Tests for project endpoints."""

    def test_list_projects(self, client: BrowserStackClient) -> None:
        """Test listing projects returns a typed paginated envelope."""
        client._session.request.return_value = _response(200, {
            "data": [PROJECT],
            "pagination": {"page": 1, "per_page": 10, "total": 1, "total_pages": 1},
        })

        result = client.list_projects()

        assert _last_call(client)["method"] == "GET"
        assert _last_call(client)["url"] == f"{DEFAULT_BASE_URL}/projects"
        assert isinstance(result, PaginatedResponse)
        assert result.data[0].name == "Test Project"
        assert result.pagination is not None
        assert result.pagination.total_pages == 1

    def test_get_project(self, client: BrowserStackClient) -> None:
        """Test fetching a project by ID."""
        client._session.request.return_value = _response(200, PROJECT)

        project = client.get_project(1)

        assert _last_call(client)["url"] == f"{DEFAULT_BASE_URL}/projects/1"
        assert project.id == 1

    def test_create_project(self, client: BrowserStackClient) -> None:
        """Test creating a project posts the request body."""
        client._session.request.return_value = _response(201, PROJECT)

        client.create_project(CreateProjectRequest(name="Test Project"))

        assert _last_call(client)["method"] == "POST"
        assert _last_call(client)["json"] == {"name": "Test Project"}

    def test_delete_project(self, client: BrowserStackClient) -> None:
        """Test deleting a project handles an empty body."""
        client._session.request.return_value = _response(204)

        assert client.delete_project(1) is None
        assert _last_call(client)["method"] == "DELETE"


class TestTestCases:
    """Tests for test case endpoints."""

    def test_list_test_cases(self, client: BrowserStackClient) -> None:
        """Test listing test cases of a project."""
        client._session.request.return_value = _response(200, {"data": [TEST_CASE]})

        result = client.list_test_cases(1)

        assert _last_call(client)["url"] == f"{DEFAULT_BASE_URL}/projects/1/test-cases"
        assert isinstance(result.data[0], TestCase)
        assert result.data[0].tags == ["login"]
        assert result.pagination is None

    def test_create_test_case_accepts_mapping(self, client: BrowserStackClient) -> None:
        """Test that plain mappings are accepted as request bodies."""
        client._session.request.return_value = _response(201, TEST_CASE)

        client.create_test_case(1, {"title": "Login works", "description": None})

        assert _last_call(client)["json"] == {"title": "Login works"}

    def test_update_test_case_path(self, client: BrowserStackClient) -> None:
        """Test the update path includes both IDs."""
        client._session.request.return_value = _response(200, TEST_CASE)

        client.update_test_case(1, 11, {"status": "inactive"})

        assert _last_call(client)["method"] == "PUT"
        assert _last_call(client)["url"] == f"{DEFAULT_BASE_URL}/projects/1/test-cases/11"


class TestTestRuns:
    """Tests for test run and test result endpoints."""

    def test_create_test_run(self, client: BrowserStackClient) -> None:
        """Test creating a run omits unset fields."""
        client._session.request.return_value = _response(201, TEST_RUN)

        run = client.create_test_run(
            1, CreateTestRunRequest(name="Nightly", status="in_progress")
        )

        assert _last_call(client)["json"] == {"name": "Nightly", "status": "in_progress"}
        assert isinstance(run, TestRun)
        assert run.status == "in_progress"

    def test_update_test_run(self, client: BrowserStackClient) -> None:
        """Test finalizing a run status."""
        client._session.request.return_value = _response(200, {**TEST_RUN, "status": "passed"})

        run = client.update_test_run(1, 21, UpdateTestRunRequest(status="passed"))

        assert _last_call(client)["url"] == f"{DEFAULT_BASE_URL}/projects/1/test-runs/21"
        assert _last_call(client)["json"] == {"status": "passed"}
        assert run.status == "passed"

    def test_update_test_run_without_body(self, client: BrowserStackClient) -> None:
        """Test that a 204 No Content answer to an update returns None."""
        client._session.request.return_value = _response(204)

        assert client.update_test_run(1, 21, UpdateTestRunRequest(status="passed")) is None
        assert _last_call(client)["method"] == "PUT"

    def test_create_test_run_without_body(self, client: BrowserStackClient) -> None:
        """Test that a create answered without a body raises BrowserStackAPIError."""
        client._session.request.return_value = _response(201)

        with pytest.raises(BrowserStackAPIError, match="Expected a resource"):
            client.create_test_run(1, CreateTestRunRequest(name="Nightly"))

    def test_add_test_result(self, client: BrowserStackClient) -> None:
        """Test submitting a result to a run."""
        client._session.request.return_value = _response(201, {
            "id": 31, "test_case_id": 11, "test_run_id": 21,
            "status": "failed", "execution_time": 250,
        })

        result = client.add_test_result(
            1, 21,
            CreateTestResultRequest(
                test_case_id=11, status="failed", execution_time=250,
                error_message="boom",
            ),
        )

        assert _last_call(client)["url"] == (
            f"{DEFAULT_BASE_URL}/projects/1/test-runs/21/test-results"
        )
        assert _last_call(client)["json"] == {
            "test_case_id": 11, "status": "failed",
            "execution_time": 250, "error_message": "boom",
        }
        assert result.execution_time == 250

    def test_list_test_results(self, client: BrowserStackClient) -> None:
        """Test listing results of a run."""
        client._session.request.return_value = _response(200, {"data": []})

        result = client.list_test_results(1, 21)

        assert len(result) == 0


class TestTestPlans:
    """Tests for test plan endpoints."""

    def test_create_test_plan(self, client: BrowserStackClient) -> None:
        """Test creating a test plan with its case IDs."""
        client._session.request.return_value = _response(201, {
            "id": 41, "project_id": 1, "name": "Smoke", "test_case_ids": [11, 12],
        })

        plan = client.create_test_plan(
            1, CreateTestPlanRequest(name="Smoke", test_case_ids=[11, 12])
        )

        assert _last_call(client)["url"] == f"{DEFAULT_BASE_URL}/projects/1/test-plans"
        assert plan.test_case_ids == [11, 12]

    def test_delete_test_plan(self, client: BrowserStackClient) -> None:
        """Test deleting a test plan."""
        client._session.request.return_value = _response(204)

        client.delete_test_plan(1, 41)

        assert _last_call(client)["url"] == f"{DEFAULT_BASE_URL}/projects/1/test-plans/41"


# ---------------------------------------------------------------------------
# Error Handling Tests
# ---------------------------------------------------------------------------


class TestErrorHandling:
    """Tests for API and transport error surfacing."""

    def test_api_error_message(self, client: BrowserStackClient) -> None:
        """Test that the server message is wrapped with the service prefix."""
        client._session.request.return_value = _response(404, {"message": "Project not found"})

        with pytest.raises(BrowserStackAPIError) as exc_info:
            client.get_project(999)

        assert str(exc_info.value) == "BrowserStack API Error: Project not found"
        assert exc_info.value.status_code == 404

    def test_api_error_with_validation_errors(self, client: BrowserStackClient) -> None:
        """Test that field-level errors are appended as JSON."""
        errors = {"name": ["is required"]}
        client._session.request.return_value = _response(
            422, {"message": "Validation failed", "errors": errors}
        )

        with pytest.raises(BrowserStackAPIError) as exc_info:
            client.create_project({"name": ""})

        assert str(exc_info.value) == (
            f"BrowserStack API Error: Validation failed - {json.dumps(errors)}"
        )
        assert exc_info.value.errors == errors

    def test_api_error_with_empty_errors(self, client: BrowserStackClient) -> None:
        """Test that an empty errors object is still appended."""
        client._session.request.return_value = _response(
            422, {"message": "Validation failed", "errors": {}}
        )

        with pytest.raises(BrowserStackAPIError) as exc_info:
            client.create_project({"name": ""})

        assert str(exc_info.value) == "BrowserStack API Error: Validation failed - {}"
        assert exc_info.value.errors == {}

    def test_api_error_without_json_body(self, client: BrowserStackClient) -> None:
        """Test that a non-JSON error body falls back to the HTTP error text."""
        response = _response(500)
        response._content = b"<html>oops</html>"
        client._session.request.return_value = response

        with pytest.raises(BrowserStackAPIError) as exc_info:
            client.list_projects()

        assert str(exc_info.value).startswith("BrowserStack API Error: 500 Server Error")

    def test_success_with_non_json_body(self, client: BrowserStackClient) -> None:
        """Test that a 2xx answer with a non-JSON body raises BrowserStackAPIError."""
        response = _response(200)
        response._content = b"<html>maintenance</html>"
        client._session.request.return_value = response

        with pytest.raises(BrowserStackAPIError) as exc_info:
            client.get_project(1)

        assert str(exc_info.value) == "BrowserStack API Error: Invalid JSON in response body"
        assert exc_info.value.status_code == 200
        assert not isinstance(exc_info.value, BrowserStackTransportError)

    def test_transport_error_keeps_raw_message(self, client: BrowserStackClient) -> None:
        """Test that a connection failure surfaces its message verbatim."""
        client._session.request.side_effect = requests.exceptions.ConnectionError(
            "Connection refused"
        )

        with pytest.raises(BrowserStackTransportError) as exc_info:
            client.list_projects()

        assert str(exc_info.value) == "Connection refused"
        assert exc_info.value.status_code is None

    def test_transport_error_is_api_error(self, client: BrowserStackClient) -> None:
        """Test that callers can catch both kinds with BrowserStackAPIError."""
        client._session.request.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(BrowserStackAPIError):
            client.list_test_runs(1)


# ---------------------------------------------------------------------------
# Model Tests
# ---------------------------------------------------------------------------


class TestModels:
    """Tests for model serialization."""

    def test_request_to_dict_omits_none(self) -> None:
        """Test that unset optional fields are not sent."""
        request = CreateTestCaseRequest(title="Login works", priority="medium")
        assert request.to_dict() == {"title": "Login works", "priority": "medium"}

    def test_test_run_from_dict_with_embedded_results(self) -> None:
        """Test that embedded results are converted to models."""
        run = TestRun.from_dict({
            **TEST_RUN,
            "test_plan_id": 5,
            "test_results": [{"id": 1, "test_case_id": 11, "test_run_id": 21, "status": "passed"}],
        })
        assert run.test_plan_id == 5
        assert run.test_results[0].status == "passed"

    def test_from_dict_ignores_unknown_keys(self) -> None:
        """Test that extra server fields do not break parsing."""
        test_case = TestCase.from_dict({**TEST_CASE, "custom_fields": {"a": 1}})
        assert test_case.title == "Login works"
