"""
Strict four-line FASTQ record reader.

Each record is exactly four lines: identifier, bases, separator and
qualities. Bases are decoded into the codes 0-4 (A, C, G, T, N) and quality
characters into integer scores using a fixed ASCII offset. Anything that does
not decode cleanly raises MalformedRecordError; there is no skipping or
repair of bad records.
"""

import logging
from typing import Iterator, NamedTuple, Optional

import numpy as np
from Bio.SeqIO.QualityIO import SANGER_SCORE_OFFSET

BASES = "ACGTN"
BASE_A, BASE_C, BASE_G, BASE_T, BASE_N = range(len(BASES))
NUM_BASES = len(BASES)
NUM_QUALITY_VALUES = 256

_INVALID_CODE = 255
_BASE_CODES = np.full(256, _INVALID_CODE, dtype=np.uint8)
for _code, _base in enumerate(BASES.encode('ascii')):
    _BASE_CODES[_base] = _code


class FastqCheckError(Exception):
    """Base class for fatal fastqcheck errors."""


class MalformedRecordError(FastqCheckError):
    """Raised for truncated records, length mismatches and undecodable characters."""

    def __init__(self, message: str, line_number: Optional[int] = None,
                 identifier: Optional[str] = None):
        self.line_number = line_number
        self.identifier = identifier
        location = []
        if line_number is not None:
            location.append(f"line {line_number}")
        if identifier is not None:
            location.append(f"read {identifier}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)


class LengthExceededError(FastqCheckError):
    """Raised when a read is longer than the configured maximum length."""

    def __init__(self, identifier: str, length: int, max_length: int):
        self.identifier = identifier
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"read {identifier} length = {length} longer than maximum length = {max_length}; "
            f"rerun with --max-length {length} or larger"
        )


class StreamOpenError(FastqCheckError):
    """Raised when the input file cannot be opened for reading."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to open fastq file {path}: {reason}")


class Record(NamedTuple):
    """A decoded FASTQ record."""
    identifier: str
    symbols: np.ndarray  # uint8 base codes, see BASES
    qualities: np.ndarray  # uint8 quality scores

    @property
    def length(self) -> int:
        return len(self.symbols)


def _strip_terminator(line: bytes) -> bytes:
    if line.endswith(b'\n'):
        line = line[:-1]
        if line.endswith(b'\r'):
            line = line[:-1]
    return line


class RecordReader:
    """Reads decoded records one at a time from a line-oriented stream.

    The stream only needs a readline() method. Binary streams are expected;
    text streams are accepted as long as every line is plain ASCII.
    """

    def __init__(self, stream, quality_offset: int = SANGER_SCORE_OFFSET):
        self.stream = stream
        self.quality_offset = quality_offset
        self.line_number = 0

    def _readline(self) -> Optional[bytes]:
        """Return the next raw line, or None at end of stream."""
        line = self.stream.readline()
        if isinstance(line, str):
            try:
                line = line.encode('ascii')
            except UnicodeEncodeError:
                self.line_number += 1
                raise MalformedRecordError("non-ASCII character", self.line_number)
        if not line:
            return None
        self.line_number += 1
        return line

    def read_record(self) -> Optional[Record]:
        """Read the next record, returning None on a clean end of stream."""
        header = self._readline()
        if header is None:
            return None
        start_line = self.line_number

        header = _strip_terminator(header)
        if header.startswith(b'@'):
            header = header[1:]
        identifier = header.decode('ascii', errors='replace')

        lines = []
        for _ in range(3):
            line = self._readline()
            if line is None:
                raise MalformedRecordError(
                    f"truncated record: expected 4 lines, found {len(lines) + 1}",
                    start_line, identifier)
            lines.append(_strip_terminator(line))
        seq_line, _separator, qual_line = lines

        if len(seq_line) != len(qual_line):
            raise MalformedRecordError(
                f"sequence length {len(seq_line)} does not match quality length {len(qual_line)}",
                start_line, identifier)

        symbols = self._decode_symbols(seq_line, start_line, identifier)
        qualities = self._decode_qualities(qual_line, start_line, identifier)
        return Record(identifier, symbols, qualities)

    def _decode_symbols(self, line: bytes, start_line: int, identifier: str) -> np.ndarray:
        raw = np.frombuffer(line, dtype=np.uint8)
        codes = _BASE_CODES[raw]
        invalid = codes == _INVALID_CODE
        if invalid.any():
            pos = int(np.argmax(invalid))
            raise MalformedRecordError(
                f"invalid base {chr(int(raw[pos]))!r} at position {pos + 1}",
                start_line, identifier)
        return codes

    def _decode_qualities(self, line: bytes, start_line: int, identifier: str) -> np.ndarray:
        scores = np.frombuffer(line, dtype=np.uint8).astype(np.int16) - self.quality_offset
        invalid = scores < 0
        if invalid.any():
            pos = int(np.argmax(invalid))
            raise MalformedRecordError(
                f"invalid quality character {chr(line[pos])!r} at position {pos + 1} "
                f"(below offset {self.quality_offset})",
                start_line, identifier)
        return scores.astype(np.uint8)

    def __iter__(self) -> Iterator[Record]:
        while True:
            record = self.read_record()
            if record is None:
                logging.debug(f"End of stream after {self.line_number} lines")
                return
            yield record


def iter_records(stream, quality_offset: int = SANGER_SCORE_OFFSET) -> Iterator[Record]:
    """Yield decoded records from a stream until a clean end of stream."""
    return iter(RecordReader(stream, quality_offset))
