"""FastAPI service exposing the occurrence engine.

Task-completion handlers call ``POST /next-occurrence`` with the task record
they are about to roll forward and persist the returned fields. The engine
itself lives in ``recurrence_engine.core``; this module only adapts HTTP
payloads to it.
"""

import logging
import os

import uvicorn as _uvicorn
from fastapi import Body, Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse

from recurrence_engine.core import (PayloadError, RuleConfigurationError,
                                    describe_custom_rule, handle_task_completion,
                                    parse_custom_rule, parse_end_condition,
                                    validate_custom_rule)
from recurrence_engine.core.codec import parse_repeat_from

uvicorn = _uvicorn  # expose for test monkeypatching

logger = logging.getLogger(__name__)

app = FastAPI(title="recurrence-engine")


def verify_api_key(x_api_key: str = Header(None)) -> str:
    """Verify the API key from the X-API-Key header.

    Args:
        x_api_key: API key from X-API-Key header

    Returns:
        The validated API key, or None when no key is configured

    Raises:
        HTTPException: If API key is missing or invalid
    """
    expected_key = os.getenv("API_KEY")

    # Open access when API_KEY is not configured
    if not expected_key:
        return None

    if not x_api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API key. Provide X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if x_api_key != expected_key:
        raise HTTPException(
            status_code=403,
            detail="Invalid API key",
        )

    return x_api_key


def _error_response(status_code, detail):
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "detail": detail},
    )


async def next_occurrence(task: dict = Body(...)):
    """Roll a completed task forward and return the fields to persist.

    Malformed recurrence configuration is not an error here: the series is
    ended and reported with ``completed: true``.
    """
    try:
        update = handle_task_completion(task)
        return JSONResponse(status_code=200, content={"status": "ok", "task": update})
    except PayloadError as exc:
        logger.warning("Rejected task payload: %s", exc)
        return _error_response(400, str(exc))
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.error("Failed to compute next occurrence: %s", exc)
        return _error_response(500, str(exc))


async def validate_rule(payload: dict = Body(...)):
    """Report whether a custom ``repeatingData`` object can be evaluated.

    ``summary`` is None when the object is too malformed to describe.
    """
    repeating_data = payload.get("repeatingData", payload)
    try:
        rule = parse_custom_rule(repeating_data)
    except RuleConfigurationError as exc:
        return JSONResponse(
            status_code=200,
            content={
                "status": "ok",
                "valid": False,
                "problems": [str(exc)],
                "summary": None,
            },
        )
    try:
        repeat_from = parse_repeat_from(payload.get("repeatFrom"))
    except PayloadError as exc:
        return _error_response(400, str(exc))
    valid, problems = validate_custom_rule(rule)
    summary = describe_custom_rule(
        rule, parse_end_condition(repeating_data), repeat_from
    )
    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "valid": valid,
            "problems": problems,
            "summary": summary,
        },
    )


__all__ = ["app", "next_occurrence", "validate_rule", "verify_api_key"]


if __name__ == "__main__":
    port = int(os.getenv("PORT", "3000"))
    # Use the module-level uvicorn for test monkeypatching
    _uvicorn.run(
        "recurrence_engine.main:app", host="0.0.0.0", port=port, reload=True
    )  # pragma: no cover

# Register the endpoints using the implementations defined above
app.post(
    "/next-occurrence",
    response_class=JSONResponse,
    dependencies=[Depends(verify_api_key)],
)(next_occurrence)
app.post(
    "/validate",
    response_class=JSONResponse,
    dependencies=[Depends(verify_api_key)],
)(validate_rule)
