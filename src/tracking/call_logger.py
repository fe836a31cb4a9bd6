# src/tracking/call_logger.py — v2
"""Insight call logging — records every orchestrator outcome.

Keeps InsightCallRecord entries in memory for the usage panel and
post-run analysis; optionally dumps them as JSON Lines.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from agrosight.llm.models import LLMResponse
from agrosight.tracking.models import InsightCallRecord

logger = logging.getLogger(__name__)


class CallLogger:
    """Accumulates insight call records.

    Args:
        max_records: Oldest records are dropped beyond this many.
    """

    def __init__(self, max_records: int = 1000) -> None:
        self._records: list[InsightCallRecord] = []
        self._max_records = max_records
        self._lock = threading.Lock()

    def record(
        self,
        category: str,
        fingerprint: str,
        source: str,
        response: LLMResponse | None = None,
        variant: str | None = None,
        error_type: str | None = None,
    ) -> InsightCallRecord:
        """Record one orchestrator outcome.

        Args:
            category: Insight category.
            fingerprint: Request fingerprint.
            source: cache, live or fallback.
            response: Provider response for live calls.
            variant: single_shot or session when the provider was invoked.
            error_type: Classified error for provider failures.

        Returns:
            The recorded InsightCallRecord.
        """
        record = InsightCallRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            category=category,
            fingerprint=fingerprint,
            source=source,
            variant=variant,
            provider=response.provider if response else None,
            model=response.model if response else None,
            input_tokens=response.input_tokens if response else 0,
            output_tokens=response.output_tokens if response else 0,
            latency_ms=response.latency_ms if response else 0,
            error_type=error_type,
        )
        with self._lock:
            self._records.append(record)
            if len(self._records) > self._max_records:
                del self._records[: len(self._records) - self._max_records]
        return record

    @property
    def records(self) -> list[InsightCallRecord]:
        """All retained records."""
        with self._lock:
            return list(self._records)

    @property
    def total_tokens(self) -> int:
        """Total tokens consumed by retained live calls."""
        return sum(r.input_tokens + r.output_tokens for r in self.records)

    def count_by_source(self) -> dict[str, int]:
        return dict(Counter(r.source for r in self.records))

    def save(self, path: Path) -> None:
        """Save all records to a JSON Lines file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            for record in self.records:
                f.write(json.dumps(record.model_dump(), default=str) + "\n")
        logger.info("Saved %d call records to %s", len(self.records), path)
