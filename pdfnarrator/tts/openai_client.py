"""OpenAI HTTP client for the speech endpoint.

Responsibilities:
- Send `/audio/speech` requests to OpenAI's REST API with `requests`.
- Classify HTTP and transport failures into stable failure kinds.
- Redact key-like tokens from provider messages before they reach diagnostics.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests

_MAX_PROVIDER_MESSAGE_CHARS = 180

_FAILURE_HEADLINES = {
    "invalid_api_key": "OpenAI authentication failed",
    "insufficient_quota": "OpenAI quota is insufficient for this request",
    "invalid_model": "OpenAI rejected the selected model",
    "rate_limited": "OpenAI rate limit reached",
    "timeout": "OpenAI request timed out",
}


class OpenAIProviderError(RuntimeError):
    """Raised when an OpenAI request fails or returns an unusable payload."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


def redact_sensitive_tokens(text: str) -> str:
    """Redact API-key-like tokens from provider error content."""

    redacted = re.sub(r"\bsk-[A-Za-z0-9_-]{8,}\b", "[redacted-key]", text)
    return re.sub(
        r"(?i)bearer\s+[A-Za-z0-9._-]{12,}",
        "Bearer [redacted-token]",
        redacted,
    )


def short_message(text: str) -> str:
    """Collapse whitespace and cap user-facing provider message length."""

    compact = " ".join(text.split())
    if len(compact) <= _MAX_PROVIDER_MESSAGE_CHARS:
        return compact
    return f"{compact[: _MAX_PROVIDER_MESSAGE_CHARS - 1]}..."


def classify_http_failure(
    status_code: int,
    provider_message: str,
    provider_code: str | None,
) -> str:
    """Classify OpenAI HTTP errors into deterministic failure kinds."""

    message_lower = provider_message.lower()
    normalized_code = provider_code.lower() if provider_code is not None else ""

    if status_code == 401 or "api key" in message_lower:
        return "invalid_api_key"
    if normalized_code in {"insufficient_quota", "insufficient_funds"} or (
        status_code in {402, 429} and ("quota" in message_lower or "balance" in message_lower)
    ):
        return "insufficient_quota"
    if normalized_code == "model_not_found" or (
        "model" in message_lower
        and any(phrase in message_lower for phrase in ("not found", "does not exist", "invalid"))
    ):
        return "invalid_model"
    if status_code == 429:
        return "rate_limited"
    if status_code in {408, 504} or "timeout" in message_lower or "timed out" in message_lower:
        return "timeout"
    return "http_error"


def _extract_provider_message(body: str) -> tuple[str, str | None]:
    """Extract a concise provider message and optional provider error code."""

    if not body:
        return "", None

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return short_message(redact_sensitive_tokens(body)), None

    provider_code: str | None = None
    message: str | None = None
    error_payload = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error_payload, dict):
        code_value = error_payload.get("code")
        if isinstance(code_value, str) and code_value.strip():
            provider_code = code_value.strip()
        message_value = error_payload.get("message")
        if isinstance(message_value, str) and message_value.strip():
            message = message_value.strip()

    return short_message(redact_sensitive_tokens(message or body)), provider_code


def _http_error_to_provider_error(exc: requests.HTTPError) -> OpenAIProviderError:
    """Convert an HTTP error into a provider exception with failure metadata."""

    response = exc.response
    status_code = response.status_code if response is not None else 0
    body = ""
    if response is not None:
        body = bytes(response.content).decode("utf-8", errors="replace").strip()
    provider_message, provider_code = _extract_provider_message(body)
    failure_kind = classify_http_failure(status_code, provider_message, provider_code)

    headline = _FAILURE_HEADLINES.get(failure_kind, "OpenAI request failed")
    if provider_message:
        detail = f"{headline} (HTTP {status_code}): {provider_message}"
    else:
        detail = f"{headline} (HTTP {status_code})."
    return OpenAIProviderError(
        detail,
        failure_kind=failure_kind,
        status_code=status_code,
        provider_code=provider_code,
    )


class OpenAISpeechClient:
    """Minimal requests-based OpenAI speech HTTP client."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 120.0,
    ) -> None:
        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def synthesize_speech(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        response_format: str = "mp3",
        speed: float = 1.0,
    ) -> bytes:
        """Return synthesized audio bytes from OpenAI `/audio/speech`."""

        if not self.api_key:
            raise OpenAIProviderError(
                "Missing OpenAI API key. Set `OPENAI_API_KEY`, use `--api-key`, or "
                "`--prompt-api-key`.",
                failure_kind="invalid_api_key",
            )

        payload = {
            "model": model,
            "voice": voice,
            "input": text,
            "response_format": response_format,
            "speed": speed,
        }
        audio = self._post_json(endpoint_path="/audio/speech", payload=payload)
        if not audio:
            raise OpenAIProviderError("OpenAI speech response is empty.")
        return audio

    def _post_json(self, *, endpoint_path: str, payload: dict[str, Any]) -> bytes:
        """POST a JSON payload and map every failure to `OpenAIProviderError`."""

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return bytes(response.content)
        except requests.HTTPError as exc:
            raise _http_error_to_provider_error(exc) from exc
        except (requests.Timeout, socket.timeout, TimeoutError) as exc:
            raise OpenAIProviderError(
                "OpenAI request timed out.",
                failure_kind="timeout",
            ) from exc
        except requests.RequestException as exc:
            raise OpenAIProviderError(
                f"OpenAI request transport error: {short_message(str(exc))}",
                failure_kind="transport",
            ) from exc
