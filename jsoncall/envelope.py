"""Request envelope construction.

Builds the single JSON object sent over the wire for one call. The skeleton
is fixed; only the method name and the argument array vary. Arguments are
rendered one by one and joined with ``", "``, so raw fragments supplied by the
caller end up in the request exactly as typed.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Iterable, Union

TRACE_ID = 0
SPAN_ID = 0
REQUEST_ID = 0
DEADLINE = 0

ARG_SEPARATOR = ", "


@dataclass(frozen=True)
class RawArg:
    """Verbatim JSON fragment, e.g. ``"foo"`` (quotes included) or ``42``."""
    text: str

    def to_json(self) -> str:
        return self.text


@dataclass(frozen=True)
class StringArg:
    """Plain string, escaped into a JSON string literal."""
    value: str

    def to_json(self) -> str:
        return json.dumps(self.value, ensure_ascii=False)


@dataclass(frozen=True)
class NumberArg:
    """Integer or finite float."""
    value: int | float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise ValueError(f"NumberArg expects int or float, got {type(self.value).__name__}")
        if isinstance(self.value, float) and not math.isfinite(self.value):
            raise ValueError(f"NumberArg cannot encode non-finite value {self.value!r}")

    def to_json(self) -> str:
        return json.dumps(self.value)


Argument = Union[RawArg, StringArg, NumberArg]


def as_argument(arg: Argument | str) -> Argument:
    """Plain strings are treated as raw fragments."""
    if isinstance(arg, str):
        return RawArg(arg)
    return arg


def parse_argument(text: str, auto_quote: bool = False) -> Argument:
    """
    Turn one command-line token into an argument.

    Without ``auto_quote`` the token is embedded verbatim. With it, tokens that
    already parse as a JSON value stay raw and everything else becomes a JSON
    string, so ``foo`` is sent as ``"foo"`` while ``42`` stays ``42``.
    """
    if not auto_quote:
        return RawArg(text)
    try:
        json.loads(text)
    except ValueError:
        return StringArg(text)
    return RawArg(text)


def render_args(args: Iterable[Argument | str] = ()) -> str:
    """Render arguments as the inside of a JSON array."""
    return ARG_SEPARATOR.join(as_argument(arg).to_json() for arg in args)


def build_request(method: str, args: Iterable[Argument | str] = ()) -> str:
    """Build the request envelope text for ``method`` called with ``args``."""
    return (
        '{"trace_context":{"trace_id":%d,"span_id":%d},'
        '"message":{"Request":{"id":%d,"message":{%s:[%s]},"deadline":%d}}}'
        % (TRACE_ID, SPAN_ID, REQUEST_ID, json.dumps(method), render_args(args), DEADLINE)
    )


def encode_request(method: str, args: Iterable[Argument | str] = ()) -> bytes:
    """UTF-8 bytes of :func:`build_request`."""
    return build_request(method, args).encode("utf-8")
