"""
Defines the summaries produced by the batch phases and by a whole pipeline run.
"""
from datetime import timedelta
from pathlib import Path
from typing import List

from .exceptions import EncodeError


class EncodeSummary:
    """
    Outcome of the transcode phase.

    Attributes:
        encoded (List[Path]): Sources that were actually passed to ffmpeg and succeeded.
        skipped (List[Path]): Sources whose output was already up to date.
        failed (List[EncodeError]): Per-file failures collected under the continue policy.
    """

    def __init__(self):
        self.encoded: List[Path] = []
        self.skipped: List[Path] = []
        self.failed: List[EncodeError] = []

    @property
    def total(self) -> int:
        return len(self.encoded) + len(self.skipped) + len(self.failed)


class MaterializeSummary:
    """
    Outcome of copying the compressed tree into the host build output.

    Attributes:
        target_dir (Path): The directory the tree was copied into.
        copied (List[Path]): Destination paths written.
        copied_bytes (int): Total size of the copied files.
    """

    def __init__(self, target_dir: Path):
        self.target_dir = target_dir
        self.copied: List[Path] = []
        self.copied_bytes = 0


class PipelineReport:
    """
    Aggregate outcome of a successful `on_start` run.

    Fatal errors are not recorded here; they propagate as exceptions carrying
    the phase, the offending path and the underlying cause.
    """

    def __init__(self):
        self.files_found = 0
        self.rejected: List[Path] = []
        self.candidates = 0
        self.encode_summary = EncodeSummary()
        self.elapsed = timedelta(0)

    @property
    def encoded_count(self) -> int:
        return len(self.encode_summary.encoded)

    @property
    def skipped_count(self) -> int:
        return len(self.encode_summary.skipped)

    @property
    def failed_count(self) -> int:
        return len(self.encode_summary.failed)
