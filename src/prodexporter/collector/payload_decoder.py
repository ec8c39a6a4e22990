"""
Decoder for the /getProdStats JSON payload.

The endpoint returns an array of objects, one per item. It's lenient in
the same ways the upstream mod is: field names may come in any case and
arrays/objects may carry a trailing comma. No partial results -- either
the whole payload decodes or DecodeError is raised.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Optional, Union

from prodexporter.errors import DecodeError
from prodexporter.metrics import ProductionDetail

# lower-cased JSON key -> ProductionDetail attribute
_NUMERIC_FIELDS: Dict[str, str] = {
    "productioncapacity": "production_capacity",
    "productionpercent": "production_percent",
    "consumptioncapacity": "consumption_capacity",
    "consumptionpercent": "consumption_percent",
    "currentproduction": "current_production",
    "currentconsumption": "current_consumption",
}

_NAME_FIELD = "itemname"


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing ] or }.

    Walks the text once, tracking whether we're inside a string literal,
    so commas in item names are left alone.
    """
    out = []
    in_string = False
    escaped = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in " \t\r\n":
                j += 1
            if j < n and text[j] in "]}":
                i += 1
                continue

        out.append(ch)
        i += 1

    return "".join(out)


def _reject_constant(token: str):
    raise DecodeError(f"{token} is not a valid JSON number")


def _to_float(value: Any, key: str, index: int) -> Optional[float]:
    if value is None:
        return None
    # bool is an int subclass; true/false is not a production figure
    if isinstance(value, bool):
        raise DecodeError(f"record {index}: {key} is a boolean, expected a number")
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            raise DecodeError(f"record {index}: {key} is out of range") from None
        if not math.isfinite(number):
            raise DecodeError(f"record {index}: {key}={number} is not a finite number")
        return number
    # Quoted numbers are rejected, same as the upstream serializer
    raise DecodeError(f"record {index}: {key} has type {type(value).__name__}, expected a number")


def _decode_record(obj: Any, index: int) -> ProductionDetail:
    if not isinstance(obj, dict):
        raise DecodeError(f"record {index} is {type(obj).__name__}, expected an object")

    # Case-insensitive keys. Unknown fields fall through and are ignored.
    lowered = {str(k).lower(): v for k, v in obj.items()}

    item_name = lowered.get(_NAME_FIELD)
    if not isinstance(item_name, str):
        raise DecodeError(f"record {index}: itemName missing or not a string")

    values = {
        attr: _to_float(lowered.get(key), key, index)
        for key, attr in _NUMERIC_FIELDS.items()
    }
    return ProductionDetail(item_name=item_name, **values)


def decode_production_details(raw: Union[bytes, str]) -> List[ProductionDetail]:
    """Parse a /getProdStats body into ProductionDetail records, in payload order."""
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"payload is not valid UTF-8: {exc}") from exc
    else:
        text = raw

    try:
        data = json.loads(strip_trailing_commas(text), parse_constant=_reject_constant)
    except ValueError as exc:
        # JSONDecodeError, or int literals past the interpreter's digit limit
        raise DecodeError(f"malformed JSON: {exc}") from exc

    if not isinstance(data, list):
        raise DecodeError(f"expected a JSON array, got {type(data).__name__}")

    return [_decode_record(obj, i) for i, obj in enumerate(data)]
