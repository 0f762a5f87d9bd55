"""Tests for the primary/fallback execution orchestrator."""

import json

import httpx
import pytest

from codeplay.client.executor import (
    ExecutionOrchestrator,
    OutcomeStatus,
    fallback_payload,
    is_network_failure,
)
from codeplay.core.languages import Language

BACKEND = "http://backend.test/api/execute"
FALLBACK = "https://sandbox.test/api/v2/piston/execute"


def make_orchestrator(recorder_obj):
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder_obj))
    return ExecutionOrchestrator(BACKEND, FALLBACK, http=http)


@pytest.mark.asyncio
async def test_primary_success_is_returned_as_is(recorder, piston_ok):
    rec = recorder(lambda request: httpx.Response(200, json=piston_ok))
    orchestrator = make_orchestrator(rec)

    outcome = await orchestrator.run(Language.python, "print('hi')", "")

    assert outcome.status is OutcomeStatus.success
    assert outcome.result.run.stdout == "hi\n"
    assert len(rec.requests) == 1
    assert json.loads(rec.requests[0].content) == {
        "language": "python",
        "code": "print('hi')",
        "stdin": "",
    }


@pytest.mark.asyncio
async def test_connection_refused_falls_back_exactly_once(recorder, piston_ok):
    def handler(request):
        if request.url.host == "backend.test":
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(200, json=piston_ok)

    rec = recorder(handler)
    outcome = await make_orchestrator(rec).run(Language.go, "package main", "5")

    assert outcome.status is OutcomeStatus.recovered
    assert outcome.result.run.code == 0
    fallback_calls = rec.to("sandbox.test")
    assert len(fallback_calls) == 1
    assert json.loads(fallback_calls[0].content) == fallback_payload(
        Language.go, "package main", "5"
    )


@pytest.mark.asyncio
async def test_server_error_falls_back(recorder, piston_ok):
    def handler(request):
        if request.url.host == "backend.test":
            return httpx.Response(503, json={"error": "down"})
        return httpx.Response(200, json=piston_ok)

    rec = recorder(handler)
    outcome = await make_orchestrator(rec).run(Language.python, "print(1)")

    assert outcome.status is OutcomeStatus.recovered
    assert len(rec.to("sandbox.test")) == 1


@pytest.mark.asyncio
async def test_client_error_never_falls_back(recorder):
    rec = recorder(
        lambda request: httpx.Response(400, json={"error": "Unsupported language: x"})
    )
    outcome = await make_orchestrator(rec).run(Language.python, "print(1)")

    assert outcome.status is OutcomeStatus.failed
    assert rec.to("sandbox.test") == []
    run = outcome.result.run
    assert run.code == 1
    assert run.signal == "ERROR"
    assert run.stdout == "" and run.output == ""
    assert run.stderr == "System Error: Unsupported language: x"
    assert outcome.result.message == "Unsupported language: x"


@pytest.mark.asyncio
async def test_fallback_failure_synthesizes_error(recorder):
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    rec = recorder(handler)
    outcome = await make_orchestrator(rec).run(Language.cpp, "int main(){}")

    assert outcome.status is OutcomeStatus.failed
    assert len(rec.requests) == 2
    assert outcome.result.run.signal == "ERROR"
    assert "Connection refused" in outcome.result.run.stderr


@pytest.mark.asyncio
async def test_malformed_primary_body_is_not_retried(recorder):
    rec = recorder(lambda request: httpx.Response(200, text="<html>oops</html>"))
    result = await make_orchestrator(rec).execute(Language.python, "print(1)")

    assert result.run.code == 1
    assert len(rec.requests) == 1


@pytest.mark.asyncio
async def test_html_makes_no_network_call(recorder):
    rec = recorder(lambda request: pytest.fail("no request expected"))
    result = await make_orchestrator(rec).execute(Language.html, "<h1>x</h1>")

    assert result.run.code == 0
    assert rec.requests == []


@pytest.mark.asyncio
async def test_unknown_language_is_a_failed_result(recorder):
    rec = recorder(lambda request: pytest.fail("no request expected"))
    result = await make_orchestrator(rec).execute("cobol", "DISPLAY 'x'.")

    assert result.run.code == 1
    assert rec.requests == []


def test_network_classification():
    request = httpx.Request("POST", BACKEND)
    assert is_network_failure(httpx.ConnectError("refused", request=request))
    assert is_network_failure(httpx.ReadTimeout("slow", request=request))
    assert is_network_failure(
        httpx.HTTPStatusError("bad", request=request, response=httpx.Response(502, request=request))
    )
    assert not is_network_failure(
        httpx.HTTPStatusError("bad", request=request, response=httpx.Response(429, request=request))
    )
    assert not is_network_failure(ValueError("nope"))


@pytest.mark.asyncio
async def test_primary_body_keeps_undeclared_fields(recorder, piston_ok):
    body = dict(piston_ok, run=dict(piston_ok["run"], memory=1024, cpu_time=12))
    body["compile_output"] = "ok"
    rec = recorder(lambda request: httpx.Response(200, json=body))

    result = await make_orchestrator(rec).execute(Language.python, "print('hi')")

    dumped = result.model_dump()
    assert dumped["compile_output"] == "ok"
    assert dumped["run"]["memory"] == 1024
    assert dumped["run"]["cpu_time"] == 12
    assert dumped["run"]["stdout"] == "hi\n"
