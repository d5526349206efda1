import httpx
from typing import Any, Dict, List, Optional
import settings
from operations.contract import SYSTEM_INSTRUCTION
from operations.errors import ContractViolation, OracleFailure
from settings import logger
from .base import FunctionCall, Oracle


def extract_function_call(response_data: Dict[str, Any]) -> FunctionCall:
    """Pull the single function call out of a generateContent reply."""

    candidates = response_data.get("candidates")
    if not isinstance(candidates, list):
        raise OracleFailure("Gemini response did not contain any candidates.")

    calls = []
    texts = []
    for candidate in candidates:
        if not isinstance(candidate, dict):
            raise OracleFailure("Gemini response contained a malformed candidate.")
        content = candidate.get("content") or {}
        if not isinstance(content, dict):
            raise OracleFailure("Gemini candidate content is malformed.")
        parts = content.get("parts") or []
        if not isinstance(parts, list):
            raise OracleFailure("Gemini candidate parts are malformed.")
        for part in parts:
            if not isinstance(part, dict):
                raise OracleFailure("Gemini response contained a malformed part.")
            if part.get("functionCall"):
                if not isinstance(part["functionCall"], dict):
                    raise OracleFailure("Gemini function call is malformed.")
                calls.append(part["functionCall"])
            elif part.get("text"):
                texts.append(part["text"])

    if not calls:
        raise ContractViolation(
            "Gemini response did not contain a function call.",
            text=" ".join(texts)[:500],
        )
    if len(calls) > 1:
        raise ContractViolation(
            f"Gemini response contained {len(calls)} function calls, expected exactly one.",
            names=[call.get("name") for call in calls],
        )

    call = calls[0]
    if not isinstance(call.get("name"), str):
        raise OracleFailure("Gemini function call has no name.")
    args = call.get("args")
    return FunctionCall(name=call["name"], args=args if isinstance(args, dict) else {})


class GeminiOracle(Oracle):
    """Oracle backed by the Gemini generateContent REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_root: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.api_root = api_root or settings.GEMINI_API_ROOT
        self.timeout = timeout or settings.ORACLE_TIMEOUT_SECONDS

    def build_request_body(self, prompt: str, declarations: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "systemInstruction": {
                "role": "system",
                "parts": [{"text": SYSTEM_INSTRUCTION}]
            },
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}]
                }
            ],
            "tools": [
                {"functionDeclarations": declarations}
            ],
            "toolConfig": {
                "functionCallingConfig": {"mode": "ANY"}
            }
        }

    async def complete(self, prompt: str, declarations: List[Dict[str, Any]]) -> FunctionCall:
        """Send the prompt to Gemini and return its function call."""

        if not self.api_key:
            raise OracleFailure("Missing Gemini API key. Set GEMINI_API_KEY or GOOGLE_GEMINI_API_KEY.")

        url = f"{self.api_root}/{self.model}:generateContent"

        logger.info("Sending command to Gemini", extra={
            "model": self.model,
            "prompt_length": len(prompt)
        })

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    json=self.build_request_body(prompt, declarations),
                    headers={"x-goog-api-key": self.api_key},
                    timeout=self.timeout
                )

                response.raise_for_status()
                response_data = response.json()

        except httpx.HTTPStatusError as e:
            error_detail = f"HTTP {e.response.status_code}"
            try:
                error_detail = e.response.json().get("error", {}).get("message", error_detail)
            except (ValueError, AttributeError):
                pass

            logger.error("Gemini request rejected", extra={
                "model": self.model,
                "status_code": e.response.status_code,
                "error": error_detail
            })

            raise OracleFailure(
                f"Gemini API request failed with status {e.response.status_code}: {error_detail}",
                status_code=e.response.status_code
            )

        except httpx.RequestError as e:
            logger.error("Gemini request failed", extra={
                "model": self.model,
                "error": str(e)
            })

            raise OracleFailure(f"Gemini request error: {str(e)}")

        except ValueError:
            raise OracleFailure("Gemini returned a response that is not valid JSON.")

        if not isinstance(response_data, dict):
            raise OracleFailure("Gemini returned an unexpected response envelope.")

        call = extract_function_call(response_data)

        logger.info("Gemini proposed operation", extra={
            "model": self.model,
            "operation": call.name
        })

        return call
