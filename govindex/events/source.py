"""
JSON-Lines Event Source

Reads an ordered event log, one decoded event per line:

    {"event": "Transfer",
     "block": {"number": 100, "timestamp": 1636000000},
     "transaction": {"hash": "0x…"},
     "logIndex": 3,
     "address": "0xc18360217d8f7ab5e7c516566761ea12ce7f9d72",
     "params": {"from": "0x…", "to": "0x…", "value": "1000000000000000000"}}

Parameter names follow the contract ABI (camelCase); uint256 values may be
given as JSON numbers, decimal strings or 0x-prefixed hex strings.
"""

from __future__ import annotations

import json
import re
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Union

from ..exceptions import EventDecodeError, UnknownEventError
from ..logger import get_logger
from .types import Event, EventContext, event_type_for

logger = get_logger(__name__)

# ABI parameter name → field name where the snake_case form is not enough
_PARAM_ALIASES: Dict[str, Dict[str, str]] = {
    "Transfer": {"from": "sender", "to": "recipient"},
}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def parse_uint(value: Any) -> int:
    """Accept JSON ints, decimal strings and 0x-hex strings."""
    if isinstance(value, bool):
        raise ValueError(f"Expected integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.lower().startswith("0x"):
            return int(s, 16)
        return int(s)
    raise ValueError(f"Expected integer, got {value!r}")


def _coerce(default: Any, value: Any) -> Any:
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return parse_uint(value)
    if isinstance(default, tuple):
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"Expected list, got {value!r}")
        return tuple(value)
    if value is None:
        return ""
    return str(value)


def decode_event(record: Dict[str, Any]) -> Event:
    """Turn one raw record into a typed event."""
    name = record.get("event")
    if not name:
        raise EventDecodeError("Record has no 'event' name")
    event_cls = event_type_for(name)
    if event_cls is None:
        raise UnknownEventError(f"Unknown event: {name}")

    block = record.get("block") or {}
    tx = record.get("transaction") or {}
    try:
        context = EventContext(
            block_number=parse_uint(block.get("number", 0)),
            block_timestamp=parse_uint(block.get("timestamp", 0)),
            transaction_hash=str(tx.get("hash", "")),
            log_index=parse_uint(record.get("logIndex", 0)),
            address=str(record.get("address", "")),
        )
    except ValueError as e:
        raise EventDecodeError(f"{name}: invalid block context: {e}") from e

    aliases = _PARAM_ALIASES.get(name, {})
    raw_params = record.get("params") or {}
    params = {aliases.get(k, _snake(k)): v for k, v in raw_params.items()}

    kwargs: Dict[str, Any] = {}
    for f in fields(event_cls):
        if f.name == "context":
            continue
        if f.name not in params:
            raise EventDecodeError(f"{name}: missing parameter '{f.name}'")
        try:
            kwargs[f.name] = _coerce(f.default, params[f.name])
        except ValueError as e:
            raise EventDecodeError(f"{name}: parameter '{f.name}': {e}") from e

    # values[] of ProposalCreated are uint256
    if "values" in kwargs:
        try:
            kwargs["values"] = tuple(parse_uint(v) for v in kwargs["values"])
        except ValueError as e:
            raise EventDecodeError(f"{name}: parameter 'values': {e}") from e

    return event_cls(context=context, **kwargs)


def iter_events(lines: Iterable[str]) -> Iterator[Event]:
    """Decode events from an iterable of JSON lines. Blank lines and '#' comments are skipped."""
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise EventDecodeError(f"line {lineno}: invalid JSON: {e}") from e
        if not isinstance(record, dict):
            raise EventDecodeError(f"line {lineno}: expected an object")
        try:
            yield decode_event(record)
        except (EventDecodeError, UnknownEventError) as e:
            raise type(e)(f"line {lineno}: {e}") from e


def read_events(path: Union[str, Path]) -> Iterator[Event]:
    """Stream events from a JSON-lines file."""
    path = Path(path)
    logger.info("Reading events from %s", path)
    with open(path, "r", encoding="utf-8") as f:
        yield from iter_events(f)


def encode_event(event: Event) -> Dict[str, Any]:
    """Inverse of decode_event (ABI-style names, big integers as strings)."""
    reverse_aliases = {v: k for k, v in _PARAM_ALIASES.get(event.name, {}).items()}
    params: Dict[str, Any] = {}
    for key, value in event.params().items():
        abi_name = reverse_aliases.get(key) or _camel(key)
        if isinstance(value, bool):
            params[abi_name] = value
        elif isinstance(value, int):
            params[abi_name] = str(value)
        elif isinstance(value, tuple):
            params[abi_name] = [str(v) if isinstance(v, int) else v for v in value]
        else:
            params[abi_name] = value
    ctx = event.context
    return {
        "event": event.name,
        "block": {"number": ctx.block_number, "timestamp": ctx.block_timestamp},
        "transaction": {"hash": ctx.transaction_hash},
        "logIndex": ctx.log_index,
        "address": ctx.address,
        "params": params,
    }


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
