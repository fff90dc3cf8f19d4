"""Utilities for reading account fields out of incoming Flask requests."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_json_request(req: Request, *, allow_empty: bool = True) -> dict:
    """Return the parsed JSON object body or raise a 400 error.

    Missing keys are left for the account service to report, so an empty
    object is accepted unless ``allow_empty`` is False.
    """

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is malformed.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    return data


def string_field(payload: Mapping[str, Any], *keys: str) -> Optional[str]:
    """Return the first of ``keys`` present in ``payload`` as a string.

    Several keys let a route accept both ``newPassword`` and
    ``new_password``.
    """

    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise BadRequest(f"The {key} field must be a string.")
        return str(value)
    return None
