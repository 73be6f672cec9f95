# SPDX-License-Identifier: Apache-2.0
"""
Unit tests for the Dispatcher.

Tests cover:
- Construction and the create_dispatcher factory
- Blocking calls: synchronous results, HTTP errors, accepted jobs
- Non-blocking calls: immediate and polled delivery, exactly once
- Failures raised before I/O, including invalid polling options, and on
  the initial transport
- Call metrics
"""

from __future__ import annotations

import json
import threading

import httpx
import pytest

from rest_action_client import (
    AbstractAction,
    ApiTransportError,
    ClientConfig,
    ConfigurationError,
    Dispatcher,
    ErrorKind,
    InvalidParameterError,
    MissingParameterError,
    Param,
    RestInfo,
    create_dispatcher,
)
from rest_action_client.observability.constants import (
    CALL_RESULTS_TOTAL,
    CALLS_TOTAL,
    TRANSPORT_ERRORS_TOTAL,
)

JOB_PATH = "/v1/api-jobs/1"
JOB_URL = f"http://10.0.0.5:8080{JOB_PATH}"


class QueryHostAction(AbstractAction):
    REST_INFO = RestInfo(path="/hosts/{uuid}", http_method="GET")
    PARAMS = {"uuid": Param(required=True)}


class CreateVmAction(AbstractAction):
    REST_INFO = RestInfo(path="/vm-instances", http_method="POST", need_poll=True)
    PARAMS = {
        "name": Param(required=True),
        "imageUuid": Param(required=True),
        "description": Param(),
    }


class DeleteHostAction(AbstractAction):
    REST_INFO = RestInfo(path="/hosts/{uuid}", http_method="DELETE")
    PARAMS = {"uuid": Param(required=True)}


class RawOptionsJobAction:
    """Protocol-only action whose options bypass Param validation."""

    def __init__(self, **options) -> None:
        self._values = {"sessionId": "sid", **options}

    def get_rest_info(self) -> RestInfo:
        return RestInfo(path="/vm-instances", http_method="POST", need_poll=True)

    def check_parameters(self) -> None:
        pass

    def get_parameter_value(self, name: str):
        return self._values.get(name)

    def get_all_parameter_names(self) -> set[str]:
        return {"sessionId"}


def create_vm(**overrides) -> CreateVmAction:
    values = {"name": "vm1", "imageUuid": "img-1", "sessionId": "sid"}
    values.update(overrides)
    return CreateVmAction(**values)


# =============================================================================
# Construction Tests
# =============================================================================


class TestDispatcherConstruction:
    def test_requires_config(self) -> None:
        with pytest.raises(ConfigurationError):
            Dispatcher(None)

    def test_create_dispatcher(self, http_client) -> None:
        dispatcher = create_dispatcher(
            "10.0.0.5", 8080, http_client=http_client, default_poll_interval_ms=200
        )
        assert dispatcher.config.base_url == "http://10.0.0.5:8080/v1"
        assert dispatcher.config.default_poll_interval_ms == 200

    def test_create_dispatcher_validates(self) -> None:
        with pytest.raises(ConfigurationError):
            create_dispatcher("")

    def test_owned_client_closed(self) -> None:
        with Dispatcher(ClientConfig(hostname="h", metrics_enabled=False)) as dispatcher:
            client = dispatcher._http
        assert client.is_closed

    def test_shared_client_left_open(self, config, http_client) -> None:
        with Dispatcher(config, http_client=http_client):
            pass
        assert not http_client.is_closed


# =============================================================================
# Blocking Call Tests
# =============================================================================


class TestBlockingCall:
    def test_synchronous_success(self, dispatcher, server) -> None:
        server.on("GET", "/v1/hosts/abc-123", (200, {"name": "h1"}))

        result = dispatcher.call(QueryHostAction(uuid="abc-123", sessionId="sid"))

        assert result.error is None
        assert result.get_payload() == {"name": "h1"}
        request = server.requests[0]
        assert request.method == "GET"
        assert request.headers["Authorization"] == "OAuth sid"

    def test_body_excludes_session_and_url_vars(self, dispatcher, server) -> None:
        server.on("POST", "/v1/vm-instances", (200, {}))

        dispatcher.call(create_vm(timeout=60_000))

        assert json.loads(server.requests[0].content) == {
            "imageUuid": "img-1",
            "name": "vm1",
        }

    def test_no_content(self, dispatcher, server) -> None:
        server.on("DELETE", "/v1/hosts/abc", (204, None))

        result = dispatcher.call(DeleteHostAction(uuid="abc", sessionId="sid"))

        assert result.error is None
        assert result.result_string is None

    def test_http_error(self, dispatcher, server) -> None:
        server.on("GET", "/v1/hosts/abc", (500, "internal failure"))

        result = dispatcher.call(QueryHostAction(uuid="abc", sessionId="sid"))

        assert result.error.kind is ErrorKind.HTTP_ERROR
        assert result.error.details == "internal failure"

    def test_accepted_job_polled_to_completion(self, dispatcher, server, sleeps) -> None:
        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        server.on("GET", JOB_PATH, (202, {}), (202, {}), (200, {"ok": True}))

        result = dispatcher.call(create_vm())

        assert result.get_payload() == {"ok": True}
        polls = server.requests_to("GET", JOB_PATH)
        assert len(polls) == 3
        assert all(p.headers["Authorization"] == "OAuth sid" for p in polls)
        assert sleeps == [1.0, 1.0]

    def test_job_failure_envelope(self, dispatcher, server) -> None:
        error = {
            "code": "SYS.1001",
            "description": "vm creation failed",
            "details": "no available host",
            "cause": {"code": "HOST.1000"},
        }
        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        server.on("GET", JOB_PATH, (503, {"error": error}))

        result = dispatcher.call(create_vm())

        assert result.result_string is None
        assert result.error.model_dump() == error

    def test_polling_options_from_action(self, dispatcher, server, sleeps) -> None:
        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        server.on("GET", JOB_PATH, (202, {}))

        result = dispatcher.call(create_vm(timeout=1000, pollingInterval=250))

        assert result.error.kind is ErrorKind.POLLING_TIMEOUT
        assert result.error.details == (
            "polling result of api[CreateVmAction] timeout after 1000 ms"
        )
        assert len(server.requests_to("GET", JOB_PATH)) == 4
        assert sleeps == [0.25] * 4

    def test_accepted_for_non_async_api(self, dispatcher, server) -> None:
        server.on("GET", "/v1/hosts/abc", (202, {"location": JOB_URL}))

        result = dispatcher.call(QueryHostAction(uuid="abc", sessionId="sid"))

        assert result.error.kind is ErrorKind.INTERNAL_ERROR
        assert "is not an async API" in result.error.description
        assert server.requests_to("GET", JOB_PATH) == []

    def test_accepted_without_location(self, dispatcher, server) -> None:
        server.on("POST", "/v1/vm-instances", (202, {"jobUuid": "j1"}))

        result = dispatcher.call(create_vm())

        assert result.error.kind is ErrorKind.INTERNAL_ERROR
        assert "polling location url" in result.error.description


# =============================================================================
# Failures Before and During the Initial Exchange
# =============================================================================


class TestCallFailures:
    def test_missing_url_var_fails_before_io(self, dispatcher, server) -> None:
        with pytest.raises(MissingParameterError) as exc:
            dispatcher.call(QueryHostAction(sessionId="sid"))
        assert exc.value.field_name == "uuid"
        assert server.requests == []

    def test_missing_session_fails_before_io(self, dispatcher, server) -> None:
        with pytest.raises(MissingParameterError):
            dispatcher.call(QueryHostAction(uuid="abc"))
        assert server.requests == []

    @pytest.mark.parametrize("value", ["abc", "0", 0])
    def test_invalid_polling_interval_fails_before_io(
        self, dispatcher, server, value
    ) -> None:
        with pytest.raises(InvalidParameterError) as exc:
            dispatcher.call(create_vm(pollingInterval=value))
        assert exc.value.field_name == "pollingInterval"
        assert server.requests == []

    def test_unchecked_zero_interval_fails_before_io(self, dispatcher, server) -> None:
        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        server.on("GET", JOB_PATH, (202, {}))

        with pytest.raises(InvalidParameterError) as exc:
            dispatcher.call(RawOptionsJobAction(pollingInterval=0))
        assert exc.value.field_name == "pollingInterval"
        assert server.requests == []

    def test_unchecked_zero_interval_fails_before_io_in_callback_mode(
        self, dispatcher, server, manual_tasks
    ) -> None:
        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        results = []

        with pytest.raises(InvalidParameterError):
            dispatcher.call(RawOptionsJobAction(pollingInterval=0), results.append)
        assert results == []
        assert server.requests == []
        assert manual_tasks.created == []

    def test_unchecked_string_timeout_fails_before_io(self, dispatcher, server) -> None:
        with pytest.raises(InvalidParameterError) as exc:
            dispatcher.call(RawOptionsJobAction(timeout="5000"))
        assert exc.value.field_name == "timeout"
        assert server.requests == []

    def test_transport_error_raises(self, dispatcher, server, metrics) -> None:
        cause = httpx.ConnectError("connection refused")
        server.on("GET", "/v1/hosts/abc", cause)

        with pytest.raises(ApiTransportError) as exc:
            dispatcher.call(QueryHostAction(uuid="abc", sessionId="sid"))

        assert exc.value.__cause__ is cause
        assert exc.value.url == "http://10.0.0.5:8080/v1/hosts/abc"
        assert metrics.get_counter(
            TRANSPORT_ERRORS_TOTAL, {"action": "QueryHostAction"}
        ) == 1

    def test_transport_error_raises_in_callback_mode(self, dispatcher, server) -> None:
        server.on("GET", "/v1/hosts/abc", httpx.ConnectError("connection refused"))
        results = []

        with pytest.raises(ApiTransportError):
            dispatcher.call(QueryHostAction(uuid="abc", sessionId="sid"), results.append)
        assert results == []


# =============================================================================
# Non-blocking Call Tests
# =============================================================================


class TestCallbackCall:
    def test_immediate_result_delivered_on_caller_thread(
        self, dispatcher, server, manual_tasks
    ) -> None:
        server.on("GET", "/v1/hosts/abc", (200, {"name": "h1"}))
        threads = []

        def on_result(result):
            threads.append(threading.current_thread())

        returned = dispatcher.call(QueryHostAction(uuid="abc", sessionId="sid"), on_result)

        assert returned is None
        assert threads == [threading.current_thread()]
        assert manual_tasks.created == []

    def test_polled_result_delivered_once(self, dispatcher, server, manual_tasks) -> None:
        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        server.on("GET", JOB_PATH, (202, {}), (202, {}), (200, {"ok": True}))
        results = []

        assert dispatcher.call(create_vm(), results.append) is None
        assert results == []

        task = manual_tasks.created[0]
        task.run_until_cancelled()
        task.tick()

        assert len(results) == 1
        assert results[0].get_payload() == {"ok": True}

    def test_completion_protocol_object(self, dispatcher, server, manual_tasks) -> None:
        class Recorder:
            def __init__(self):
                self.results = []

            def complete(self, result):
                self.results.append(result)

        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        server.on("GET", JOB_PATH, (200, None))
        recorder = Recorder()

        dispatcher.call(create_vm(), recorder)
        manual_tasks.created[0].run_until_cancelled()

        assert len(recorder.results) == 1

    def test_invalid_completion_rejected(self, dispatcher, server) -> None:
        with pytest.raises(TypeError):
            dispatcher.call(QueryHostAction(uuid="abc", sessionId="sid"), object())
        assert server.requests == []

    def test_action_call_convenience(self, dispatcher, server) -> None:
        server.on("GET", "/v1/hosts/abc", (200, {"name": "h1"}))
        results = []

        QueryHostAction(uuid="abc", sessionId="sid").call(dispatcher, results.append)

        assert results[0].get_payload() == {"name": "h1"}

    def test_background_thread_delivery(
        self, config, http_client, server, metrics
    ) -> None:
        """With the real RecurringTask the callback fires from the poll thread."""
        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        server.on("GET", JOB_PATH, (202, {}), (200, {"ok": True}))
        done = threading.Event()
        seen = []

        def on_result(result):
            seen.append((result, threading.current_thread().name))
            done.set()

        dispatcher = Dispatcher(config, http_client=http_client, metrics=metrics)
        dispatcher.call(create_vm(pollingInterval=10), on_result)

        assert done.wait(timeout=5.0)
        assert len(seen) == 1
        result, thread_name = seen[0]
        assert result.get_payload() == {"ok": True}
        assert thread_name == "poll-CreateVmAction"


# =============================================================================
# Metrics Tests
# =============================================================================


class TestDispatcherMetrics:
    def test_call_and_result_counters(self, dispatcher, server, metrics) -> None:
        server.on("GET", "/v1/hosts/abc", (200, {}), (404, "gone"))
        action = QueryHostAction(uuid="abc", sessionId="sid")

        dispatcher.call(action)
        dispatcher.call(action)

        assert metrics.get_counter(
            CALLS_TOTAL, {"action": "QueryHostAction", "mode": "blocking"}
        ) == 2
        assert metrics.get_counter(
            CALL_RESULTS_TOTAL, {"action": "QueryHostAction", "outcome": "success"}
        ) == 1
        assert metrics.get_counter(
            CALL_RESULTS_TOTAL,
            {"action": "QueryHostAction", "outcome": "SDK.HTTP_ERROR"},
        ) == 1

    def test_server_error_outcome(self, dispatcher, server, metrics) -> None:
        server.on("POST", "/v1/vm-instances", (202, {"location": JOB_URL}))
        server.on("GET", JOB_PATH, (503, {"error": {"code": "SYS.1001"}}))

        dispatcher.call(create_vm())

        assert metrics.get_counter(
            CALL_RESULTS_TOTAL, {"action": "CreateVmAction", "outcome": "server_error"}
        ) == 1

    def test_metrics_disabled(self, http_client, server, metrics) -> None:
        config = ClientConfig(hostname="10.0.0.5", metrics_enabled=False)
        server.on("GET", "/v1/hosts/abc", (200, {}))

        dispatcher = Dispatcher(config, http_client=http_client, metrics=metrics)
        dispatcher.call(QueryHostAction(uuid="abc", sessionId="sid"))

        assert metrics.get_metrics()["counters"] == {}
