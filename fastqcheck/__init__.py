"""
fastqcheck: streaming statistics and strict validation for FASTQ read files.

Reads four-line FASTQ records from a file or standard input, accumulates
per-position and whole-file base composition and quality distributions, and
prints a fixed-format text summary. Any malformed record is a fatal error.
"""

__version__ = "1.2.0"

from .core import main, check_fastq
from .config import CheckConfig

__all__ = ["main", "check_fastq", "CheckConfig", "__version__"]
