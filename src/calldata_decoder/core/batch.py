"""Batch stage: concurrent analysis of multiSend sub-calls."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import List, Optional

from ..batch import OPERATION_LABELS, batch_type_for, parse_multisend, summarize
from ..models import BatchInfo, DecodeOptions, Operation, SubCall, SubCallRecord
from ..trust import TrustProfile

logger = logging.getLogger(__name__)


class DecoderBatchMixin:
    def _analyze_sub_call(
        self,
        record: SubCallRecord,
        profile: Optional[TrustProfile],
        options: DecodeOptions,
    ) -> SubCall:
        operation = Operation(record.operation)
        # Nested batches are analyzed at call level only
        analysis = self._analyze_call(record.data, record.to, operation, profile, options, value=record.value)
        return SubCall(
            index=record.index,
            operation=operation,
            operation_label=OPERATION_LABELS[operation],
            to=record.to,
            value=record.value,
            data_length=len(record.data),
            analysis=analysis,
        )

    def _analyze_batch(
        self,
        data: bytes,
        target: Optional[str],
        profile: Optional[TrustProfile],
        options: DecodeOptions,
    ) -> BatchInfo:
        """
        Parse a multiSend payload and analyze every sub-call.

        Sub-calls run concurrently; each result is stored at its record index
        so the output order always equals payload order.

        Raises:
            InvalidCalldataError: the payload is malformed (no partial result)
        """
        batch_type = batch_type_for(target)
        # Sub-calls never reach the untrusted network lookup
        sub_options = replace(options, offline=True)
        records = parse_multisend(data, batch_type)
        logger.info(f"Analyzing {len(records)} sub-call(s) of {batch_type.value} batch")

        calls: List[Optional[SubCall]] = [None] * len(records)
        if records:
            workers = min(self.max_workers, len(records))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._analyze_sub_call, record, profile, sub_options): record.index
                    for record in records
                }
                for future in as_completed(futures):
                    # Re-raises the first sub-call failure; the batch fails as a whole
                    calls[futures[future]] = future.result()

        summary = summarize(call.analysis.header_severity for call in calls)
        logger.info(f"Batch overall severity: {summary.overall_severity.value} {summary.counts}")
        return BatchInfo(
            batch_type=batch_type,
            calls=calls,
            call_count=len(calls),
            batch_summary=summary,
        )
