"""
Copies the compressed audio tree into the host build's output directory.

This runs after the host has produced its build output. Every file is copied
on every run; there is no staleness check for this phase.
"""
import shutil
from pathlib import Path
from typing import Tuple

from loguru import logger

from ..config.common import DEFAULT_WORKERS, FAILURE_POLICY_ABORT
from ..domain.exceptions import MaterializeError
from ..domain.reports import MaterializeSummary
from ..utils.format_utils import formatted_size, plural
from .batch_base import BatchRunner
from .file_processing_service import walk_files


class OutputMaterializer(BatchRunner):
    """
    Mirrors `compressed_dir` into `target_dir`, file by file.

    The first copy failure aborts the phase. Files copied before the failure
    are left in place.
    """

    def __init__(self, workers: int = DEFAULT_WORKERS):
        super().__init__(workers=workers, failure_policy=FAILURE_POLICY_ABORT)
        self.compressed_dir = Path()
        self.target_dir = Path()
        self.summary = MaterializeSummary(self.target_dir)

    def run(self, compressed_dir: Path, target_dir: Path) -> MaterializeSummary:
        """
        Copies every file under `compressed_dir` to the same relative path under `target_dir`.

        Args:
            compressed_dir: Root of the encoded tree.
            target_dir: Destination root inside the host build output.

        Returns:
            The list of copied files and their total size.

        Raises:
            ScanError: `compressed_dir` cannot be walked.
            MaterializeError: A directory could not be created or a file could not be copied.
        """
        self.compressed_dir = compressed_dir.resolve()
        self.target_dir = target_dir.resolve()
        self.summary = MaterializeSummary(self.target_dir)

        if self.target_dir == self.compressed_dir:
            logger.info(f"Compressed audio already lives in {self.target_dir}. Nothing to copy.")
            return self.summary

        files = walk_files(self.compressed_dir)
        self.progress_description = f"Copying compressed audio to {self.target_dir.name}"
        logger.info(f"Copying {plural(len(files), 'file')} from {self.compressed_dir} to {self.target_dir}...")
        self.process_multi_file(files)
        logger.info(
            f"\tCopied {plural(len(self.summary.copied), 'file')} "
            f"({formatted_size(self.summary.copied_bytes)})."
        )
        return self.summary

    def process_single_file(self, source_file: Path) -> Tuple[Path, int]:
        target_file = self.target_dir / source_file.relative_to(self.compressed_dir)
        try:
            target_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source_file, target_file)
            size = target_file.stat().st_size
        except OSError as e:
            raise MaterializeError(
                f"Failed to copy {source_file} to {target_file}: {e}", path=source_file
            ) from e
        return target_file, size

    def on_item_done(self, source_file: Path, result: Tuple[Path, int]):
        target_file, size = result
        self.summary.copied.append(target_file)
        self.summary.copied_bytes += size
