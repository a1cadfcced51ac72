"""
Response interpretation.

Turns one transport result into a decoded payload and an ErrorState update.
"""

from __future__ import annotations

import json
from typing import Any

from premium_api.errors import ErrorCode, ErrorState, coerce_error_code
from premium_api.shared.logging import get_logger
from premium_api.transport.interface import RawHttpResult, TransportResult

logger = get_logger(__name__)


def interpret_response(result: TransportResult | None, state: ErrorState) -> Any | None:
    """Decode a response body and classify the outcome.

    Args:
        result: Transport result of the call; a failure (or nothing at all)
            leaves ``state`` untouched, since the caller already recorded why.
        state: Error slot of the calling client.

    Returns:
        The decoded payload, or ``None`` on any failure.
    """
    if not isinstance(result, RawHttpResult):
        return None

    state.reset()

    if not result.body:
        logger.warning("Empty response", extra={"status": result.status_code})
        state.set(ErrorCode.EMPTY_RESPONSE, "Empty response from Premium")
        return None

    try:
        payload = json.loads(result.body.decode("utf-8"))
    except UnicodeDecodeError as e:
        state.set(ErrorCode.INVALID_RESPONSE, f"Response is not valid UTF-8: {e.reason}")
        return None
    except json.JSONDecodeError as e:
        logger.warning(
            "Unparseable response",
            extra={"status": result.status_code, "error": e.msg, "pos": e.pos},
        )
        state.set(
            ErrorCode.INVALID_RESPONSE,
            f"JSON parsing error: {e.msg} (line {e.lineno}, column {e.colno})",
        )
        return None

    if not payload:
        state.set(ErrorCode.INVALID_RESPONSE, "Invalid response from Premium, cannot parse")
        return None

    code = coerce_error_code(payload.get("ErrNo") or 0) if isinstance(payload, dict) else ErrorCode.NONE
    if code != ErrorCode.NONE:
        message = str(payload.get("Error") or "")
        logger.info("Service reported error", extra={"err_no": int(code), "error": message})
        state.set(code, message)
        return None

    return payload
