"""Storage key and client id derivation.

Every component that writes or reads a field uses these functions, so the
rendering here is the store's addressing scheme: it has to stay byte-for-byte
stable across releases.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Final

from graphnorm.domain.ast import Variable

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from graphnorm.domain.ast import (
        Argument,
        FieldHandle,
        JSONObject,
        JSONValue,
        LinkedField,
        MatchField,
        ScalarField,
    )
    from graphnorm.domain.store.record import DataID

CLIENT_ID_PREFIX: Final[str] = "client:"

type ClientIDGenerator = Callable[[DataID, str, int | None], DataID]


def format_number(value: float) -> str:
    """Render a float the way ECMAScript's ``Number::toString`` does.

    Python's ``repr`` already yields the shortest round-tripping digits; only the
    placement of the decimal point and the exponent notation differ. Integral
    values below ``1e21`` print without a fraction, ``1e21`` and up use
    ``1e+21`` and small magnitudes use ``1e-7`` rather than ``1e-07``.
    Non-finite values have no JSON form and render as ``null``.
    """

    if math.isnan(value) or math.isinf(value):
        return "null"
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    mantissa, _, exponent = repr(abs(value)).partition("e")
    whole, _, fraction = mantissa.partition(".")
    raw = whole + fraction
    significant = raw.lstrip("0")
    # value == 0.<digits> * 10**point
    point = len(whole) + int(exponent or "0") - (len(raw) - len(significant))
    digits = significant.rstrip("0")
    count = len(digits)

    if count <= point <= 21:
        rendered = digits + "0" * (point - count)
    elif 0 < point <= 21:
        rendered = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        rendered = f"0.{'0' * -point}{digits}"
    else:
        power = point - 1
        power_text = f"+{power}" if power >= 0 else str(power)
        head = digits if count == 1 else f"{digits[0]}.{digits[1:]}"
        rendered = f"{head}e{power_text}"
    return sign + rendered


def _render(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        items = [
            f"{json.dumps(str(key), ensure_ascii=False)}:{_render(value[key])}"
            for key in sorted(value, key=str)
        ]
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_render(item) for item in value) + "]"
    raise TypeError(f"Value of type {type(value).__name__} is not JSON serializable")


def canonical_json(value: object) -> str:
    """Render ``value`` as JSON with sorted keys, no whitespace and JS number forms."""

    return _render(value)


def format_storage_key(name: str, args: Mapping[str, object] | None = None) -> str:
    """Return ``name`` or ``name(k1:v1,k2:v2)`` with argument names sorted."""

    if not args:
        return name
    rendered = [f"{arg_name}:{canonical_json(args[arg_name])}" for arg_name in sorted(args)]
    return f"{name}({','.join(rendered)})"


def get_argument_values(
    args: Iterable[Argument], variables: Mapping[str, JSONValue]
) -> JSONObject:
    """Resolve argument values, omitting arguments bound to unset variables."""

    values: JSONObject = {}
    for arg in args:
        if isinstance(arg.value, Variable):
            if arg.value.name not in variables:
                continue
            values[arg.name] = variables[arg.value.name]
        else:
            values[arg.name] = arg.value
    return values


def get_storage_key(field: ScalarField | LinkedField, variables: Mapping[str, JSONValue]) -> str:
    if field.storage_key is not None:
        return field.storage_key
    return format_storage_key(field.name, get_argument_values(field.args, variables))


def get_match_storage_key(field: MatchField) -> str:
    """Key a match field by all of its cases so it is stable whichever case resolves."""

    if field.storage_key is not None:
        return field.storage_key
    if not field.cases:
        return field.name
    entries = sorted(f"{case.fragment_name}:{case.module_name}" for case in field.cases)
    return f"{field.name}({','.join(entries)})"


def get_handle_key(handle: str, key: str, field_name: str) -> str:
    if key:
        return f"__{key}_{handle}"
    return f"__{field_name}_{handle}"


def get_handle_storage_key(
    field: ScalarField | LinkedField,
    handle: FieldHandle,
    variables: Mapping[str, JSONValue],
) -> str:
    handle_name = get_handle_key(handle.handle, handle.key, field.name)
    if not field.args or not handle.filters:
        return handle_name
    filtered = [arg for arg in field.args if arg.name in handle.filters]
    return format_storage_key(handle_name, get_argument_values(filtered, variables))


def generate_client_id(parent_id: DataID, storage_key: str, index: int | None = None) -> DataID:
    """Derive the id of a record that has no id of its own."""

    key = f"{parent_id}:{storage_key}"
    if index is not None:
        key = f"{key}:{index}"
    if not key.startswith(CLIENT_ID_PREFIX):
        key = CLIENT_ID_PREFIX + key
    return key


def is_client_id(data_id: DataID) -> bool:
    return data_id.startswith(CLIENT_ID_PREFIX)
