"""
Line formatting for the bounded log file.

One record becomes exactly one text line::

    [2024-05-01 12:00:00] [error] [admin] [10.0.0.1] Hello Bob Original context: {"name":"Bob"}

The context is encoded with orjson, which leaves non-ASCII characters and
forward slashes unescaped and keeps insertion order.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Final, Mapping

import orjson

from .levels import LogLevel
from .values import COMPLEX_MARKER, render_value

NONE_MARKER: Final[str] = "[NONE]"
TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Keys that already carry a placeholder sigil are substituted verbatim
_SIGILS: Final[tuple[str, ...]] = ("@", "%", ":")


def _placeholder_tokens(context: Mapping[Any, Any]) -> dict[str, Any]:
    tokens: dict[str, Any] = {}
    for key, value in context.items():
        name = str(key)
        tokens["{" + name + "}"] = value
        if name.startswith(_SIGILS) and len(name) > 1:
            tokens[name] = value
    return tokens


def interpolate(message: str, context: Mapping[Any, Any] | None) -> str:
    """Substitute ``{key}`` placeholders in ``message`` from ``context``.

    Substitution is a single left-to-right pass preferring the longest token,
    so substituted text is never scanned again. Placeholders without a
    matching key are left untouched.
    """
    if not context:
        return message
    tokens = _placeholder_tokens(context)
    pattern = re.compile(
        "|".join(re.escape(t) for t in sorted(tokens, key=len, reverse=True))
    )
    rendered: dict[str, str] = {}

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token not in rendered:
            rendered[token] = render_value(tokens[token])
        return rendered[token]

    return pattern.sub(_replace, message)


def _json_default(obj: Any) -> Any:
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).decode("utf-8", errors="replace")
    if type(obj).__str__ is not object.__str__:
        return str(obj)
    if hasattr(obj, "__dict__"):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    return COMPLEX_MARKER


def encode_context(context: Mapping[Any, Any] | None) -> str:
    """Encode ``context`` as compact JSON, or ``[NONE]`` when empty."""
    if not context:
        return NONE_MARKER
    try:
        data = orjson.dumps(
            dict(context),
            default=_json_default,
            option=orjson.OPT_NON_STR_KEYS,
        )
    except orjson.JSONEncodeError:
        # Circular references or integers beyond 64 bits
        return COMPLEX_MARKER
    return data.decode("utf-8")


def format_line(
    level: LogLevel | str,
    message: str,
    context: Mapping[Any, Any] | None,
    *,
    actor: str,
    client_ip: str | None,
    now: datetime,
) -> str:
    """Compose one newline-terminated log line."""
    return "[{}] [{}] [{}] [{}] {} Original context: {}\n".format(
        now.strftime(TIMESTAMP_FORMAT),
        LogLevel.parse(level).value,
        actor,
        client_ip or NONE_MARKER,
        interpolate(str(message), context),
        encode_context(context),
    )
