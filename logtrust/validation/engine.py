"""
Validation Engine: batch signature verification for package log records.

Guarantees:
- output has exactly the input's length and order
- verdict i depends only on record i
- per-record failures (unknown key, malformed or mismatched signature,
  unsupported algorithm, failed crypto check) become False, never exceptions

Large batches are verified on a thread pool; Executor.map keeps input order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

from ..core.errors import TrustError
from ..keys.algorithms import verify_signature
from ..keys.registry import KeyRegistry
from ..metrics import track_validate_duration, track_verdict
from .model import PackageLogRecord

logger = logging.getLogger(__name__)

DEFAULT_PARALLEL_THRESHOLD = 64


class ValidationEngine:
    """
    Verifies package log record signatures against a key registry.

    Args:
        registry: Key registry (read-only use)
        max_workers: Thread pool size; None lets the executor choose,
            1 disables the pool
        parallel_threshold: Minimum batch size that uses the pool
    """

    def __init__(
        self,
        registry: KeyRegistry,
        max_workers: Optional[int] = None,
        parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
    ):
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be >= 1 or None")
        if parallel_threshold < 1:
            raise ValueError("parallel_threshold must be >= 1")
        self.registry = registry
        self.max_workers = max_workers
        self.parallel_threshold = parallel_threshold

    def verify_record(self, record: PackageLogRecord) -> bool:
        """
        Verdict for a single record. Never raises.
        """
        if not isinstance(record, PackageLogRecord):
            logger.debug("Rejecting non-record input of type %s", type(record).__name__)
            return False
        if not isinstance(record.content_bytes, (bytes, bytearray)):
            logger.debug("Rejecting record with non-bytes content (key_id=%s)", record.key_id)
            return False

        try:
            public_key = self.registry.resolve(record.key_id)
        except Exception:
            logger.warning("Key registry lookup failed for key_id=%s", record.key_id, exc_info=True)
            return False

        if public_key is None:
            logger.debug("Unknown key id %s", record.key_id)
            return False

        try:
            verify_signature(public_key, bytes(record.content_bytes), record.signature)
        except TrustError as e:
            logger.debug("Record rejected (key_id=%s): %s", record.key_id, e)
            return False
        return True

    def _verdict(self, record: PackageLogRecord) -> bool:
        verdict = self.verify_record(record)
        track_verdict(verdict)
        return verdict

    def _use_pool(self, count: int) -> bool:
        return count >= self.parallel_threshold and self.max_workers != 1

    def validate(self, records: Iterable[PackageLogRecord]) -> List[bool]:
        """
        Verify every record and return verdicts in input order.

        Args:
            records: Zero or more records; duplicates and empty content allowed

        Returns:
            List of booleans, same length and order as records

        Raises:
            TypeError: If records is None
        """
        if records is None:
            raise TypeError("records must be an iterable of PackageLogRecord, not None")
        batch = list(records)

        with track_validate_duration():
            if self._use_pool(len(batch)):
                with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                    verdicts = list(pool.map(self._verdict, batch))
            else:
                verdicts = [self._verdict(record) for record in batch]

        logger.debug(
            "Validated %d record(s): %d valid, %d invalid",
            len(verdicts),
            sum(verdicts),
            len(verdicts) - sum(verdicts),
        )
        return verdicts


def validate(
    records: Iterable[PackageLogRecord],
    registry: KeyRegistry,
    max_workers: Optional[int] = None,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
) -> List[bool]:
    """
    Verify a batch of package log records.

    Returns:
        Per-record verdicts in input order; validate([]) == []
    """
    engine = ValidationEngine(
        registry,
        max_workers=max_workers,
        parallel_threshold=parallel_threshold,
    )
    return engine.validate(records)
