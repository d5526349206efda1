"""
Feature: Ask the language model for exactly one operation
  As the command processor
  I want the model's reply reduced to a single function call
  So that free text or ambiguous replies never become board changes

Scenario: Prompt carries the numbering hint
  Given the next free case number is 8
  When the prompt is built
  Then it ends with the system hint to start numbering from TASK-8

Scenario: Reply with one function call
  Given Gemini answers with a single functionCall part
  When the oracle completes the prompt
  Then the function call is returned with its arguments

Scenario: Reply without a usable function call
  Given Gemini answers with free text, several calls or an unknown name
  When the reply is interpreted
  Then a contract violation is raised

Scenario: Gemini cannot be reached or rejects the request
  Given the API key is missing, the request errors or Gemini returns an HTTP error
  When the oracle completes the prompt
  Then an oracle failure is raised
"""

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from operations.contract import FUNCTION_DECLARATIONS
from operations.errors import ContractViolation, ErrorKind, OracleFailure
from oracle.adapter import build_prompt, propose_operation
from oracle.base import FunctionCall, OracleFactory
from oracle.gemini import GeminiOracle, extract_function_call

GEMINI_URL = "https://gemini.test/models/gemini-test:generateContent"


def gemini_reply(*parts):
    return {"candidates": [{"content": {"role": "model", "parts": list(parts)}}]}


def gemini_response(status_code, payload):
    return httpx.Response(status_code, json=payload, request=httpx.Request("POST", GEMINI_URL))


@pytest.fixture(name="oracle")
def oracle_fixture():
    return GeminiOracle(api_key="test-key", model="gemini-test", api_root="https://gemini.test/models", timeout=5)


def test_build_prompt_appends_numbering_hint():
    prompt = build_prompt("Design login page - high priority, put in backlog", 8)

    assert prompt.startswith("Design login page - high priority, put in backlog")
    assert prompt.endswith("[System: Start task numbering from TASK-8]")


@pytest.mark.asyncio
async def test_propose_operation_success():
    # Given an oracle that proposes a known operation
    fake_oracle = MagicMock()
    fake_oracle.complete = AsyncMock(
        return_value=FunctionCall(name="delete_task", args={"caseNumber": "TASK-5"})
    )

    # When an operation is proposed
    call = await propose_operation(fake_oracle, "delete TASK-5", 3)

    # Then the call is returned and the full contract was offered
    assert call.name == "delete_task"
    prompt, declarations = fake_oracle.complete.await_args.args
    assert prompt.endswith("[System: Start task numbering from TASK-3]")
    assert declarations is FUNCTION_DECLARATIONS


@pytest.mark.asyncio
async def test_propose_operation_unknown_name():
    fake_oracle = MagicMock()
    fake_oracle.complete = AsyncMock(return_value=FunctionCall(name="archive_everything", args={}))

    with pytest.raises(ContractViolation) as exc_info:
        await propose_operation(fake_oracle, "archive everything", 1)

    assert exc_info.value.details["operation"] == "archive_everything"


def test_extract_function_call_single_call():
    reply = gemini_reply({"functionCall": {"name": "create_column", "args": {"title": "QA"}}})

    call = extract_function_call(reply)

    assert call == FunctionCall(name="create_column", args={"title": "QA"})


def test_extract_function_call_free_text():
    # Given the model answered in prose
    reply = gemini_reply({"text": "Sure, I moved it for you."})

    # When the reply is interpreted
    with pytest.raises(ContractViolation) as exc_info:
        extract_function_call(reply)

    # Then the text is kept for diagnosis
    assert exc_info.value.details["text"] == "Sure, I moved it for you."


def test_extract_function_call_multiple_calls():
    reply = gemini_reply(
        {"functionCall": {"name": "delete_task", "args": {"caseNumber": "TASK-1"}}},
        {"functionCall": {"name": "delete_task", "args": {"caseNumber": "TASK-2"}}}
    )

    with pytest.raises(ContractViolation) as exc_info:
        extract_function_call(reply)

    assert "expected exactly one" in exc_info.value.message


def test_extract_function_call_without_candidates():
    with pytest.raises(OracleFailure):
        extract_function_call({"promptFeedback": {"blockReason": "SAFETY"}})


@pytest.mark.parametrize("reply", [
    {"candidates": ["oops"]},
    {"candidates": [{"content": "oops"}]},
    {"candidates": [{"content": {"parts": "oops"}}]},
    {"candidates": [{"content": {"parts": ["text"]}}]},
    {"candidates": [{"content": {"parts": [{"functionCall": "delete_board"}]}}]},
])
def test_extract_function_call_malformed_reply(reply):
    with pytest.raises(OracleFailure) as exc_info:
        extract_function_call(reply)

    assert exc_info.value.kind == ErrorKind.ORACLE_FAILURE


@pytest.mark.asyncio
async def test_gemini_complete_success(oracle):
    # Given Gemini answers with one function call
    reply = gemini_reply({"functionCall": {"name": "update_board", "args": {"name": "Roadmap"}}})

    with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
        mock_post.return_value = gemini_response(200, reply)

        # When the oracle completes the prompt
        call = await oracle.complete("rename the board to Roadmap", FUNCTION_DECLARATIONS)

    # Then the call is returned
    assert call.name == "update_board"
    assert call.args == {"name": "Roadmap"}

    # And the request forced function calling with the full contract
    url = mock_post.await_args.args[0]
    body = mock_post.await_args.kwargs["json"]
    assert url == GEMINI_URL
    assert mock_post.await_args.kwargs["headers"] == {"x-goog-api-key": "test-key"}
    assert body["toolConfig"]["functionCallingConfig"]["mode"] == "ANY"
    assert body["tools"][0]["functionDeclarations"] is FUNCTION_DECLARATIONS
    assert body["contents"][0]["parts"][0]["text"] == "rename the board to Roadmap"


@pytest.mark.asyncio
async def test_gemini_complete_http_error(oracle):
    # Given Gemini rejects the request
    with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
        mock_post.return_value = gemini_response(500, {"error": {"message": "backend unavailable"}})

        # When the oracle completes the prompt
        with pytest.raises(OracleFailure) as exc_info:
            await oracle.complete("delete TASK-1", FUNCTION_DECLARATIONS)

    # Then the failure carries the status and Gemini's explanation
    error = exc_info.value.to_error()
    assert error.kind == ErrorKind.ORACLE_FAILURE
    assert error.details["status_code"] == 500
    assert "backend unavailable" in error.message


@pytest.mark.asyncio
async def test_gemini_complete_request_error(oracle):
    with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
        mock_post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(OracleFailure) as exc_info:
            await oracle.complete("delete TASK-1", FUNCTION_DECLARATIONS)

    assert "connection refused" in exc_info.value.message


@pytest.mark.asyncio
async def test_gemini_complete_missing_api_key():
    oracle = GeminiOracle(api_key="")

    with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock) as mock_post:
        with pytest.raises(OracleFailure) as exc_info:
            await oracle.complete("delete TASK-1", FUNCTION_DECLARATIONS)

    assert "Missing Gemini API key" in exc_info.value.message
    mock_post.assert_not_called()


def test_oracle_factory():
    assert isinstance(OracleFactory.get_oracle("gemini"), GeminiOracle)

    with pytest.raises(ValueError):
        OracleFactory.get_oracle("unknown")
