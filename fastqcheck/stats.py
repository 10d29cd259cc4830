"""
Streaming per-position and whole-file statistics for FASTQ records.

FastqStats folds records in one at a time and keeps only fixed-width
histograms, so memory is bounded by the maximum read length rather than the
number of reads. finalize() turns the counters into a Report holding
percentages, per-mille quality distributions and the AQ error-rate quality.
"""

import logging
import math
from typing import List, NamedTuple, Optional

import numpy as np

from fastqcheck.reader import NUM_BASES, NUM_QUALITY_VALUES, LengthExceededError, Record

STD_DEV_CONFIDENCE = 0.25
INITIAL_CAPACITY = 1024

# Probability that a call with quality q is wrong
ERROR_PROBABILITIES = 10.0 ** (-np.arange(NUM_QUALITY_VALUES) / 10.0)


class ScopeSummary(NamedTuple):
    """Statistics for the whole file or for a single read position."""
    count: int  # bases in scope (total length, or reads covering the position)
    composition: List[float]  # percentage of A, C, G, T, N
    quality_permille: List[int]  # per-mille of each quality value 0..max_quality
    average_quality: float  # AQ: quality of the mean error probability


class Report(NamedTuple):
    """Aggregated results of a run, ready for rendering."""
    record_count: int
    total_length: int
    max_length: int
    max_quality: int
    average_length: Optional[float]
    total_std_dev: Optional[float]
    per_base_std_dev: Optional[float]
    overall: Optional[ScopeSummary]
    positions: List[Optional[ScopeSummary]]

    @property
    def quality_values(self) -> range:
        if self.overall is None:
            return range(0)
        return range(self.max_quality + 1)


def permille(counts: np.ndarray, denom: int) -> List[int]:
    """Parts per thousand of each count, rounded half away from zero."""
    scaled = 1000.0 * np.asarray(counts, dtype=np.float64) / denom
    return [int(v) for v in np.floor(scaled + 0.5)]


def average_error_quality(quality_counts: np.ndarray, denom: int) -> float:
    """Phred-scaled mean error probability over a quality histogram.

    Averaging happens on the probability scale, so a few low-quality calls
    pull the result down much more than they would in a plain mean of q.
    """
    counts = np.asarray(quality_counts, dtype=np.float64)
    expected_errors = float(np.dot(counts, ERROR_PROBABILITIES[:len(counts)]))
    return -10.0 * math.log10(expected_errors / denom)


def relative_std_dev(n: int, confidence: float = STD_DEV_CONFIDENCE) -> float:
    """Relative standard deviation in percent for a binomial count of n at p=confidence."""
    return 100.0 * math.sqrt(confidence * n) / n


class FastqStats:
    """Accumulator state for one run.

    Position-indexed histograms grow on demand up to max_length positions.
    Totals are Python ints; per-bucket counters are int64.
    """

    def __init__(self, max_length: int):
        if max_length < 1:
            raise ValueError(f"max_length must be at least 1, got {max_length}")
        self.max_length = max_length
        self.record_count = 0
        self.total_length = 0
        self.longest = 0
        self.max_quality = 0
        self.symbol_counts = np.zeros(NUM_BASES, dtype=np.int64)
        self.quality_counts = np.zeros(NUM_QUALITY_VALUES, dtype=np.int64)

        capacity = min(INITIAL_CAPACITY, max_length)
        self.length_histogram = np.zeros(capacity + 1, dtype=np.int64)
        self.position_symbol_counts = np.zeros((capacity, NUM_BASES), dtype=np.int64)
        self.position_quality_counts = np.zeros((capacity, NUM_QUALITY_VALUES), dtype=np.int64)

    @property
    def capacity(self) -> int:
        return len(self.position_symbol_counts)

    def _grow(self, length: int):
        capacity = self.capacity
        while capacity < length:
            capacity *= 2
        capacity = min(capacity, self.max_length)
        logging.debug(f"Growing position histograms from {self.capacity} to {capacity} positions")

        extra = capacity - self.capacity
        self.length_histogram = np.concatenate(
            [self.length_histogram, np.zeros(extra, dtype=np.int64)])
        self.position_symbol_counts = np.concatenate(
            [self.position_symbol_counts, np.zeros((extra, NUM_BASES), dtype=np.int64)])
        self.position_quality_counts = np.concatenate(
            [self.position_quality_counts, np.zeros((extra, NUM_QUALITY_VALUES), dtype=np.int64)])

    def accumulate(self, record: Record):
        """Fold one record into the counters.

        Raises LengthExceededError, leaving the state unchanged, when the
        record is longer than max_length.
        """
        length = record.length
        if length > self.max_length:
            raise LengthExceededError(record.identifier, length, self.max_length)
        if length > self.capacity:
            self._grow(length)

        self.record_count += 1
        self.total_length += length
        self.length_histogram[length] += 1
        if length > self.longest:
            self.longest = length
        if length == 0:
            return

        positions = np.arange(length)
        # Each row is hit once per record, so fancy-index increments are exact
        self.position_symbol_counts[positions, record.symbols] += 1
        self.position_quality_counts[positions, record.qualities] += 1
        self.symbol_counts += np.bincount(record.symbols, minlength=NUM_BASES)
        self.quality_counts += np.bincount(record.qualities, minlength=NUM_QUALITY_VALUES)
        self.max_quality = max(self.max_quality, int(record.qualities.max()))

    def _summarize(self, symbol_counts: np.ndarray, quality_counts: np.ndarray,
                   denom: int) -> ScopeSummary:
        composition = [100.0 * int(c) / denom for c in symbol_counts]
        quality_counts = quality_counts[:self.max_quality + 1]
        return ScopeSummary(
            count=denom,
            composition=composition,
            quality_permille=permille(quality_counts, denom),
            average_quality=average_error_quality(quality_counts, denom),
        )

    def finalize(self) -> Report:
        """Build the Report from the accumulated counters."""
        average_length = None
        if self.record_count:
            average_length = self.total_length / self.record_count

        if not self.total_length:
            return Report(
                record_count=self.record_count,
                total_length=self.total_length,
                max_length=self.longest,
                max_quality=self.max_quality,
                average_length=average_length,
                total_std_dev=None,
                per_base_std_dev=None,
                overall=None,
                positions=[],
            )

        overall = self._summarize(self.symbol_counts, self.quality_counts, self.total_length)

        # Reads of length <= i contribute nothing at position i, so deplete
        # the running read count one length bucket at a time.
        positions = []
        remaining = self.record_count
        for i in range(self.longest):
            remaining -= int(self.length_histogram[i])
            if remaining <= 0:
                positions.append(None)
                continue
            positions.append(self._summarize(self.position_symbol_counts[i],
                                             self.position_quality_counts[i],
                                             remaining))

        return Report(
            record_count=self.record_count,
            total_length=self.total_length,
            max_length=self.longest,
            max_quality=self.max_quality,
            average_length=average_length,
            total_std_dev=relative_std_dev(self.total_length),
            per_base_std_dev=relative_std_dev(self.record_count),
            overall=overall,
            positions=positions,
        )
