# pixelbridge_project/core/request_parsing.py
"""
Reads the inbound event from either a JSON or a form-encoded body.

Form posts use bracketed keys for nesting (`userData[email]=...`,
`customData[content_ids][]=sku-1`), which are folded into the same nested
shape a JSON body would have. An empty body is treated as `{}` so that it is
rejected for its missing eventName rather than as a malformed payload.
"""
import json
import re
from typing import Any, Dict, Iterable, List, Tuple

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ..models.event_models import InboundEvent

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

_BRACKET_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def _key_path(key: str) -> List[str]:
    head, bracket, rest = key.partition("[")
    if not bracket:
        return [key]
    return [head] + _BRACKET_SEGMENT.findall(bracket + rest)


def _descend(data: Dict[str, Any], path: List[str]) -> Dict[str, Any]:
    node = data
    for segment in path:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child
    return node


def fold_form_fields(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """Turns flat `a[b][c]=v` form fields into nested dicts; `a[]` and `a[0]` collect into lists."""
    data: Dict[str, Any] = {}
    for key, value in items:
        segments = _key_path(key)
        last = segments[-1]
        if len(segments) > 1 and (last == "" or last.isdigit()):
            container = _descend(data, segments[:-2])
            values = container.get(segments[-2])
            if not isinstance(values, list):
                values = []
                container[segments[-2]] = values
            values.append(value)
            continue

        container = _descend(data, segments[:-1])
        existing = container.get(last)
        if existing is None or isinstance(existing, dict):
            container[last] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            # repeated plain key
            container[last] = [existing, value]
    return data


def _as_request_validation_error(exc: ValidationError) -> RequestValidationError:
    errors = [{**err, "loc": ("body", *err["loc"])} for err in exc.errors(include_url=False)]
    return RequestValidationError(errors)


async def read_inbound_event(request: Request) -> InboundEvent:
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        payload: Any = fold_form_fields(form.multi_items())
    else:
        raw = await request.body()
        if not raw.strip():
            payload = {}
        else:
            try:
                payload = json.loads(raw)
            except ValueError as e:
                raise RequestValidationError(
                    [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": {}, "ctx": {"error": str(e)}}]
                )

    try:
        return InboundEvent.model_validate(payload)
    except ValidationError as e:
        raise _as_request_validation_error(e)
