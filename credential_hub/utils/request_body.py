"""Reading JSON request bodies."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from flask import jsonify, request

NOT_AN_OBJECT = "Request body must be a JSON object"


def json_object(error_key: str = "error") -> Tuple[Dict[str, Any], Optional[Any]]:
    """Return the JSON body as a dict, or a 400 response when it is not an object.

    A missing or unparsable body reads as ``{}``.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        return {}, None
    if not isinstance(payload, dict):
        return {}, (jsonify({error_key: NOT_AN_OBJECT}), 400)
    return payload, None
