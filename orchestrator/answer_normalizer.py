import re
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from models.outcomes import AttemptResult, Failure, FailureKind, Success

# Answers shorter than this (after trimming) are treated as empty "successes".
MIN_ANSWER_CHARS = 1

_QUOTA_PATTERN = re.compile(r"quota|rate[ _-]?limit|too many requests|credits", re.I)


class _EnvelopeMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str


class _EnvelopeChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: _EnvelopeMessage


class ProviderEnvelope(BaseModel):
    """Minimal shape of a chat-completion success body."""

    model_config = ConfigDict(extra="ignore")

    choices: list[_EnvelopeChoice]


class ProviderErrorBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: int | str | None = None
    message: str = ""


def classify_status(status: int | None, message: str = "") -> FailureKind:
    """Map an HTTP-ish status code (plus provider message) onto the failure taxonomy."""
    if status in (401, 403):
        return FailureKind.AUTH_ERROR
    if status == 429 or _QUOTA_PATTERN.search(message or ""):
        return FailureKind.RATE_LIMITED
    if status == 408:
        return FailureKind.TIMEOUT
    if status is not None and (status == 404 or status >= 500):
        return FailureKind.MODEL_UNAVAILABLE
    if status is not None and 400 <= status < 500:
        return FailureKind.MODEL_UNAVAILABLE
    return FailureKind.MALFORMED_RESPONSE


def _status_from_code(code: int | str | None) -> int | None:
    if isinstance(code, int):
        return code
    if isinstance(code, str) and code.isdigit():
        return int(code)
    return None


class AnswerNormalizer:
    def __init__(self, thresholds: dict[str, int] | None = None):
        self._thresholds = thresholds or {}

    @property
    def min_answer_chars(self) -> int:
        return int(self._thresholds.get("min_answer_chars", MIN_ANSWER_CHARS))

    def normalize_text(self, text: str) -> AttemptResult:
        cleaned = text.strip()
        if len(cleaned) < max(self.min_answer_chars, 1):
            return Failure.of(
                FailureKind.MALFORMED_RESPONSE,
                detail=f"answer shorter than {self.min_answer_chars} characters",
            )
        return Success(text=cleaned)

    def normalize(self, raw: Any) -> AttemptResult:
        """
        Unwrap a provider response envelope into an AttemptResult.

        Args:
            raw: Decoded JSON body (dict) of a chat-completion response

        Returns:
            Success with the trimmed answer, or a classified Failure. Never raises
            for unexpected shapes; those become MalformedResponse.
        """
        if not isinstance(raw, dict):
            return Failure.of(
                FailureKind.MALFORMED_RESPONSE, detail=f"unexpected body type {type(raw).__name__}"
            )

        # OpenRouter reports some upstream failures inside a 2xx body
        error_body = raw.get("error")
        if error_body:
            return self._classify_error_body(error_body)

        try:
            envelope = ProviderEnvelope.model_validate(raw)
        except ValidationError as e:
            return Failure.of(
                FailureKind.MALFORMED_RESPONSE, detail=f"envelope mismatch: {e.error_count()} errors"
            )

        if not envelope.choices:
            return Failure.of(FailureKind.MALFORMED_RESPONSE, detail="empty choices")

        return self.normalize_text(envelope.choices[0].message.content)

    def _classify_error_body(self, error_body: Any) -> AttemptResult:
        if isinstance(error_body, str):
            body = ProviderErrorBody(message=error_body)
        else:
            try:
                body = ProviderErrorBody.model_validate(error_body)
            except ValidationError:
                return Failure.of(FailureKind.MALFORMED_RESPONSE, detail="unreadable error payload")

        kind = classify_status(_status_from_code(body.code), body.message)
        return Failure.of(kind, detail=f"provider error {body.code}: {body.message}"[:300])


def normalize(raw: Any) -> AttemptResult:
    return AnswerNormalizer().normalize(raw)


def normalize_text(text: str) -> AttemptResult:
    return AnswerNormalizer().normalize_text(text)
