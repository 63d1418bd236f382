"""ElevenLabs HTTP client for voice listing, voice cloning, and speech synthesis.

Responsibilities:
- Send voice, clone, and text-to-speech requests to the ElevenLabs REST API.
- Surface streamed audio chunks exactly as they arrive from the network.
- Raise actionable provider exceptions carrying status text and response body.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any, Iterator
from urllib.parse import quote

import requests

from ..config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from ..models.datatypes import SpeechRequest


class ElevenLabsProviderError(RuntimeError):
    """Raised when an ElevenLabs request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        status_text: str | None = None,
        body: str | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for call-level diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        self.provider_code = provider_code


class ElevenLabsClient:
    """Minimal requests-based ElevenLabs REST client.

    No retries are performed; every failure is raised to the caller.
    """

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize ElevenLabs HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def __repr__(self) -> str:
        return f"ElevenLabsClient(base_url={self.base_url!r})"

    def _require_api_key(self) -> None:
        """Require API key presence before issuing requests."""

        if not self.api_key:
            raise ElevenLabsProviderError(
                "Missing ElevenLabs API key. Set `ELEVENLABS_API_KEY` or use `--api-key`.",
                failure_kind="invalid_api_key",
            )

    def _headers(self, *, json_body: bool = False) -> dict[str, str]:
        headers = {"xi-api-key": self.api_key}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def list_voices(self) -> list[dict[str, Any]]:
        """Return raw voice records from `GET /voices`."""

        self._require_api_key()
        response = self._send(
            "get",
            "/voices",
            headline="Failed to fetch voices",
            headers=self._headers(),
        )
        payload = self._decode_json(response, "voices")
        voices = payload.get("voices") if isinstance(payload, dict) else None
        if not isinstance(voices, list):
            raise ElevenLabsProviderError(
                "ElevenLabs voices response missing `voices` list.",
                failure_kind="malformed_response",
            )
        return [voice for voice in voices if isinstance(voice, dict)]

    def add_voice(self, *, name: str, audio: bytes, filename: str = "reference.wav") -> str:
        """Create an instant voice clone from one audio sample and return its voice id."""

        self._require_api_key()
        response = self._send(
            "post",
            "/voices/add",
            headline="ElevenLabs voice cloning failed",
            headers=self._headers(),
            data={"name": name},
            files=[("files", (filename, audio, "application/octet-stream"))],
        )
        payload = self._decode_json(response, "voice clone")
        voice_id = payload.get("voice_id") if isinstance(payload, dict) else None
        if not isinstance(voice_id, str) or not voice_id.strip():
            raise ElevenLabsProviderError(
                "ElevenLabs voice clone response missing `voice_id`.",
                failure_kind="malformed_response",
            )
        return voice_id.strip()

    def synthesize(self, request: SpeechRequest) -> bytes:
        """Return the complete audio payload for a batch speech request."""

        self._require_api_key()
        response = self._send(
            "post",
            self._speech_path(request),
            headline="ElevenLabs TTS failed",
            headers=self._headers(json_body=True),
            params=request.query,
            json=request.body,
        )
        audio = bytes(response.content)
        if not audio:
            raise ElevenLabsProviderError(
                "ElevenLabs speech response is empty.",
                failure_kind="empty_response",
                status_code=response.status_code,
            )
        return audio

    def stream(self, request: SpeechRequest) -> Iterator[bytes]:
        """Yield audio chunks from the streaming endpoint as they arrive.

        The request is issued on first iteration. Closing the iterator early
        releases the underlying connection and is not an error.
        """

        self._require_api_key()
        response = self._send(
            "post",
            self._speech_path(request),
            headline="ElevenLabs TTS streaming failed",
            headers=self._headers(json_body=True),
            params=request.query,
            json=request.body,
            stream=True,
        )
        received = False
        try:
            for chunk in response.iter_content(chunk_size=None):
                if not chunk:
                    continue
                received = True
                yield bytes(chunk)
        except requests.RequestException as exc:
            raise ElevenLabsProviderError(
                f"ElevenLabs stream interrupted: {self._short_message(str(exc))}",
                failure_kind=self._classify_transport_failure(exc),
            ) from exc
        finally:
            response.close()

        if not received:
            raise ElevenLabsProviderError(
                "ElevenLabs streaming response body is empty.",
                failure_kind="empty_response",
                status_code=response.status_code,
            )

    def probe(self) -> bool:
        """Return whether `GET /voices` currently answers with a success status."""

        if not self.api_key:
            return False
        try:
            response = requests.get(
                f"{self.base_url}/voices",
                headers=self._headers(),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException:
            return False
        return 200 <= response.status_code < 300

    @staticmethod
    def _speech_path(request: SpeechRequest) -> str:
        suffix = "/stream" if request.streaming else ""
        return f"/text-to-speech/{quote(request.voice_id, safe='')}{suffix}"

    def _send(
        self,
        method: str,
        endpoint_path: str,
        *,
        headline: str,
        **kwargs: Any,
    ) -> requests.Response:
        """Execute one request and map failures consistently."""

        endpoint = f"{self.base_url}{endpoint_path}"
        send = requests.get if method == "get" else requests.post
        try:
            response = send(endpoint, timeout=self.timeout_seconds, **kwargs)
            response.raise_for_status()
        except requests.HTTPError as exc:
            error = self._http_error_to_provider_error(exc, headline)
            if exc.response is not None:
                exc.response.close()
            raise error from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = f"{headline}: request timed out."
            else:
                detail = f"{headline}: transport error: {self._short_message(str(exc))}"
            raise ElevenLabsProviderError(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise ElevenLabsProviderError(
                f"{headline}: request timed out.",
                failure_kind="timeout",
            ) from exc
        return response

    @staticmethod
    def _decode_json(response: requests.Response, label: str) -> Any:
        try:
            return json.loads(bytes(response.content).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ElevenLabsProviderError(
                f"ElevenLabs returned invalid JSON for {label}.",
                failure_kind="malformed_response",
            ) from exc

    @staticmethod
    def _decode_error_body(exc: requests.HTTPError) -> str:
        """Decode an HTTP error body into a best-effort UTF-8 payload string."""

        response = exc.response
        if response is None:
            return ""
        try:
            return bytes(response.content).decode("utf-8", errors="replace").strip()
        except (requests.RequestException, TypeError):
            return ""

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bsk_[A-Za-z0-9]{8,}\b", "[redacted-key]", text)
        redacted = re.sub(
            r"(?i)xi-api-key[\"']?\s*[:=]\s*[\"']?[A-Za-z0-9_-]{8,}",
            "xi-api-key: [redacted-key]",
            redacted,
        )
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap user-facing provider message length."""

        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract a concise message and optional provider status code from an error body.

        ElevenLabs reports errors as `{"detail": {"status": ..., "message": ...}}`,
        `{"detail": "..."}`, or a validation list under `detail`.
        """

        if not body:
            return "", None

        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body)), None

        provider_code: str | None = None
        message: str | None = None
        detail = payload.get("detail") if isinstance(payload, dict) else None
        if isinstance(detail, dict):
            status_value = detail.get("status")
            if isinstance(status_value, str) and status_value.strip():
                provider_code = status_value.strip()
            message_value = detail.get("message")
            if isinstance(message_value, str) and message_value.strip():
                message = message_value.strip()
        elif isinstance(detail, str) and detail.strip():
            message = detail.strip()
        elif isinstance(detail, list):
            parts = [
                item["msg"]
                for item in detail
                if isinstance(item, dict) and isinstance(item.get("msg"), str)
            ]
            if parts:
                message = "; ".join(parts)

        if message is None:
            message = body

        return cls._short_message(cls._redact_sensitive_tokens(message)), provider_code

    @staticmethod
    def _classify_http_failure(
        status_code: int,
        provider_message: str,
        provider_code: str | None,
    ) -> str:
        """Classify ElevenLabs HTTP errors into deterministic diagnostic kinds."""

        message_lower = provider_message.lower()
        normalized_code = provider_code.lower() if provider_code is not None else ""

        if normalized_code == "quota_exceeded" or "quota" in message_lower:
            return "quota_exceeded"
        if (
            status_code == 401
            or normalized_code in {"invalid_api_key", "needs_authorization"}
            or "api key" in message_lower
        ):
            return "invalid_api_key"
        if normalized_code == "voice_not_found" or (
            status_code == 404 and "voice" in message_lower
        ):
            return "voice_not_found"
        if status_code == 429:
            return "rate_limited"
        if status_code in {408, 504} or "timeout" in message_lower or "timed out" in message_lower:
            return "timeout"
        if status_code in {400, 422}:
            return "invalid_request"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        """Classify network-layer failures into deterministic diagnostic kinds."""

        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(
        cls, exc: requests.HTTPError, headline: str
    ) -> ElevenLabsProviderError:
        """Convert HTTP errors into provider exceptions carrying status text and body."""

        response = exc.response
        # `Response.__bool__` mirrors `ok`, so failed responses must be compared to None.
        status_code = response.status_code if response is not None else 0
        status_text = ""
        if response is not None:
            status_text = (getattr(response, "reason", None) or "").strip()
        body = cls._decode_error_body(exc)
        provider_message, provider_code = cls._extract_provider_message(body)
        failure_kind = cls._classify_http_failure(status_code, provider_message, provider_code)

        status_label = f"HTTP {status_code} {status_text}".strip()
        if provider_message:
            detail = f"{headline} ({status_label}): {provider_message}"
        else:
            detail = f"{headline} ({status_label})."

        return ElevenLabsProviderError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            status_text=status_text or None,
            body=cls._redact_sensitive_tokens(body) if body else None,
            provider_code=provider_code,
        )
