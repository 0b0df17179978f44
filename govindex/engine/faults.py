"""
Integrity Fault Reporting

Transitions never stop the stream when the data looks wrong. They report a
fault here instead: the fault is logged with its parameters substituted into
the message template, kept in a bounded in-memory buffer, counted per kind
and exported as a metric. Reporting never raises.
"""

from __future__ import annotations

import time
from collections import Counter as _Tally, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Tuple

from ..constants import MAX_FAULTS_RETAINED
from ..logger import get_logger

logger = get_logger(__name__)


class FaultKind(str, Enum):
    """Categories of detected problems."""
    # Integrity faults: upstream events missing or out of order
    NEGATIVE_BALANCE = "NEGATIVE_BALANCE"
    NEGATIVE_REPRESENTATION = "NEGATIVE_REPRESENTATION"
    MISSING_PROPOSER = "MISSING_PROPOSER"
    MISSING_PROPOSAL = "MISSING_PROPOSAL"
    DELEGATE_VOTES_MISMATCH = "DELEGATE_VOTES_MISMATCH"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    DUPLICATE_PROPOSAL = "DUPLICATE_PROPOSAL"
    DUPLICATE_VOTE = "DUPLICATE_VOTE"
    NEGATIVE_POOL_BALANCE = "NEGATIVE_POOL_BALANCE"
    OUT_OF_ORDER_EVENT = "OUT_OF_ORDER_EVENT"
    DELEGATE_RESET = "DELEGATE_RESET"
    # Processing faults
    EVENT_FAILED = "EVENT_FAILED"
    UNKNOWN_EVENT = "UNKNOWN_EVENT"

    @property
    def is_integrity(self) -> bool:
        return self not in (FaultKind.EVENT_FAILED, FaultKind.UNKNOWN_EVENT)


# Reported at WARNING; everything else at ERROR
_WARNING_KINDS = frozenset({
    FaultKind.ILLEGAL_TRANSITION,
    FaultKind.DUPLICATE_VOTE,
    FaultKind.DUPLICATE_PROPOSAL,
    FaultKind.OUT_OF_ORDER_EVENT,
    FaultKind.DELEGATE_RESET,
    FaultKind.UNKNOWN_EVENT,
})


def format_message(template: str, params: Tuple[Any, ...]) -> str:
    """
    Substitute ``{}`` placeholders in order.

    Surplus parameters are appended, missing ones leave the placeholder, so a
    mismatched template can never break reporting.
    """
    pieces = template.split("{}")
    out: List[str] = [pieces[0]]
    for i, piece in enumerate(pieces[1:]):
        out.append(str(params[i]) if i < len(params) else "{}")
        out.append(piece)
    extra = params[len(pieces) - 1:]
    if extra:
        out.append(" " + " ".join(str(p) for p in extra))
    return "".join(out)


@dataclass(frozen=True)
class IntegrityFault:
    """One reported problem."""
    kind: FaultKind
    message: str
    params: Tuple[str, ...] = ()
    event_name: Optional[str] = None
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    reported_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "params": list(self.params),
            "event": self.event_name,
            "blockNumber": self.block_number,
            "transactionHash": self.transaction_hash,
        }


class FaultSink:
    """
    Observability sink for integrity faults.

    Args:
        metrics: Optional IndexerMetrics; integrity and processing faults feed separate counters
        max_retained: Size of the in-memory fault buffer
    """

    def __init__(self, metrics=None, max_retained: int = MAX_FAULTS_RETAINED):
        self._metrics = metrics
        self._faults: Deque[IntegrityFault] = deque(maxlen=max(1, max_retained))
        self._counts: _Tally = _Tally()

    def report(self, kind: FaultKind, template: str, *params: Any, event=None) -> IntegrityFault:
        """
        Record a fault.

        Args:
            kind: Fault category
            template: Message with ``{}`` placeholders
            *params: Values substituted into the placeholders
            event: The event being processed, for block / tx context
        """
        message = format_message(template, params)
        ctx = getattr(event, "context", None)
        fault = IntegrityFault(
            kind=kind,
            message=message,
            params=tuple(str(p) for p in params),
            event_name=getattr(event, "name", None),
            block_number=ctx.block_number if ctx is not None else None,
            transaction_hash=ctx.transaction_hash if ctx is not None else None,
        )
        self._faults.append(fault)
        self._counts[kind] += 1
        if self._metrics is not None:
            if kind.is_integrity:
                self._metrics.integrity_faults.inc()
            else:
                self._metrics.processing_faults.inc()

        where = f" (block #{ctx.block_number}, tx {ctx.transaction_hash or '-'})" if ctx is not None else ""
        if kind in _WARNING_KINDS:
            logger.warning("[%s] %s%s", kind.value, message, where)
        else:
            logger.error("[%s] %s%s", kind.value, message, where)
        return fault

    # ── Queries ───────────────────────────────────────────────────────

    @property
    def faults(self) -> List[IntegrityFault]:
        return list(self._faults)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def count(self, kind: Optional[FaultKind] = None) -> int:
        if kind is None:
            return self.total
        return self._counts.get(kind, 0)

    def counts(self) -> Dict[str, int]:
        return {kind.value: n for kind, n in sorted(self._counts.items(), key=lambda kv: kv[0].value)}

    def of_kind(self, kind: FaultKind) -> List[IntegrityFault]:
        return [f for f in self._faults if f.kind == kind]

    def clear(self) -> None:
        self._faults.clear()
        self._counts.clear()
