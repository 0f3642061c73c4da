"""Parsing and retry helpers for question-source replies."""

import re
import sys

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

_FENCE_RE = re.compile(r"```(?:json|yaml)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

TRANSIENT_STATUS_CODES = (429, 500, 502, 503, 529)


def strip_fences(text: str) -> str:
    """Strip markdown code fences from model output if present."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def _is_transient(exc: BaseException) -> bool:
    """Return True for network errors and HTTP statuses worth retrying."""
    if isinstance(exc, (httpx.TimeoutException, httpx.ConnectError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in TRANSIENT_STATUS_CODES
    return False


def invoke_with_retry(llm, messages, retries: int, label: str = "model"):
    """Call llm.invoke(messages), backing off exponentially on transient errors.

    retries is the number of extra attempts after the first one; label names
    the caller in retry notices. Auth failures and other non-transient errors
    are raised immediately.
    """
    retries = max(0, retries)

    @retry(
        stop=stop_after_attempt(retries + 1),  # first attempt counts
        wait=wait_exponential(multiplier=1, min=2, max=16),
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda state: print(
            f"[iterform] {label}: transient error {state.outcome.exception()!r}. "
            f"Retrying in {state.next_action.sleep:.0f}s "
            f"(attempt {state.attempt_number}/{retries})...",
            file=sys.stderr,
        ),
    )
    def _invoke():
        return llm.invoke(messages)

    return _invoke()
