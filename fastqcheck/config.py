"""Configuration for a fastqcheck run."""

from dataclasses import dataclass

from Bio.SeqIO.QualityIO import SANGER_SCORE_OFFSET, SOLEXA_SCORE_OFFSET

DEFAULT_MAX_LENGTH = 100000
SUPPORTED_QUALITY_OFFSETS = (SANGER_SCORE_OFFSET, SOLEXA_SCORE_OFFSET)


@dataclass
class CheckConfig:
    """Configuration for a single pass over a FASTQ stream.

    Attributes:
        max_length: Longest read accepted; longer reads abort the run (default: 100000)
        quality_offset: ASCII offset of the quality encoding (default: 33, Sanger/Illumina 1.8+)
        show_progress: Show a progress bar on stderr while reading (default: False)
    """
    max_length: int = DEFAULT_MAX_LENGTH
    quality_offset: int = SANGER_SCORE_OFFSET
    show_progress: bool = False

    def validate(self) -> None:
        if self.max_length < 1:
            raise ValueError(f"max_length must be at least 1, got {self.max_length}")
        if self.quality_offset not in SUPPORTED_QUALITY_OFFSETS:
            raise ValueError(
                f"Unsupported quality offset {self.quality_offset} "
                f"(expected one of {', '.join(str(o) for o in SUPPORTED_QUALITY_OFFSETS)})"
            )

    @classmethod
    def from_args(cls, args) -> 'CheckConfig':
        """Create config from command-line arguments.

        The phred64 arg selects the old Illumina 1.3+ offset; otherwise the
        Sanger offset is used.
        """
        phred64 = getattr(args, 'phred64', False)
        return cls(
            max_length=getattr(args, 'max_length', DEFAULT_MAX_LENGTH),
            quality_offset=SOLEXA_SCORE_OFFSET if phred64 else SANGER_SCORE_OFFSET,
            show_progress=getattr(args, 'progress', False),
        )
