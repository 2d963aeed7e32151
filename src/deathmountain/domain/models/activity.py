from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ChainEventRef:
    """Location of an indexed event on chain.

    Torii identifiers look like ``0x<block>:0x<tx hash>:0x<...>:0x<event index>``.
    They are parsed once, when a row enters the feed; consumers read the
    structured fields and never split the raw string again.
    """

    raw_id: Optional[str] = None
    block_number: Optional[int] = None
    tx_hash: Optional[str] = None
    event_index: Optional[int] = None

    @classmethod
    def parse(cls, raw_id: Any) -> "ChainEventRef":
        if not isinstance(raw_id, str) or ":" not in raw_id:
            return cls(raw_id=raw_id if isinstance(raw_id, str) else None)
        parts = raw_id.split(":")
        return cls(
            raw_id=raw_id,
            block_number=_parse_hex(parts[0]),
            tx_hash=(parts[1] or None) if len(parts) > 1 else None,
            event_index=_parse_hex(parts[3]) if len(parts) > 3 else None,
        )

    def as_dict(self) -> dict:
        return {
            "id": self.raw_id,
            "blockNumber": self.block_number,
            "txHash": self.tx_hash,
            "eventIndex": self.event_index,
        }


def _parse_hex(value: str) -> Optional[int]:
    text = str(value or "").strip().lower()
    if not text.startswith("0x"):
        return None
    try:
        return int(text, 16)
    except ValueError:
        return None


@dataclass(frozen=True)
class ActivityFeedEntry:
    kind: str
    timestamp: Optional[datetime]
    summary: Dict[str, Any] = field(default_factory=dict)
    message: str = ""
    action_count: Optional[int] = None
    chain: ChainEventRef = field(default_factory=ChainEventRef)

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "at": self.timestamp.isoformat() if self.timestamp is not None else None,
            "actionCount": self.action_count,
            "data": dict(self.summary),
            "message": self.message,
            "meta": self.chain.as_dict(),
        }
