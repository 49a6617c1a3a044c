"""
Provides services for discovering and validating the raw audio files.

This module contains the logic for the scan phase of the pipeline:
- Walking a directory tree and collecting every regular file.
- Classifying the files into recognized audio assets and rejects.
- Detecting assets that would be encoded to the same output file.
"""

import stat
from collections import deque
from itertools import combinations
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from loguru import logger

from ..config.audio import AUDIO_EXTENSIONS
from ..domain.exceptions import ConflictError, ScanError
from ..domain.media import AudioAsset
from ..utils.format_utils import plural


def walk_files(root: Path) -> List[Path]:
    """
    Lists every regular file below `root`, at any depth.

    Directories are traversed with an explicit work queue, so deeply nested
    trees cannot exhaust the call stack. The result is a complete list in no
    particular order.

    Symlinks are neither followed nor returned, and special files (FIFOs,
    sockets, devices) are skipped. An unreadable subdirectory is logged and
    skipped.

    Args:
        root: The directory to walk.

    Returns:
        The absolute paths of all regular files found.

    Raises:
        ScanError: `root` does not exist, is not a directory, or cannot be read.
    """
    root = root.resolve()
    if not root.is_dir():
        raise ScanError(f"Directory does not exist: {root}", path=root)

    found_files: List[Path] = []
    pending_dirs = deque([root])
    while pending_dirs:
        current_dir = pending_dirs.popleft()
        try:
            entries = list(current_dir.iterdir())
        except OSError as e:
            if current_dir == root:
                raise ScanError(f"Cannot read directory {root}: {e}", path=root) from e
            logger.warning(f"Skipping unreadable directory {current_dir}: {e}")
            continue

        for entry in entries:
            try:
                mode = entry.lstat().st_mode
            except FileNotFoundError:
                # Removed between listing and stat.
                continue
            if stat.S_ISDIR(mode):
                pending_dirs.append(entry)
            elif stat.S_ISREG(mode):
                found_files.append(entry)
            elif stat.S_ISLNK(mode):
                logger.debug(f"Skipping symlink: {entry}")
            else:
                logger.debug(f"Skipping special file: {entry}")

    return found_files


def classify_files(
    files: Iterable[Path], extensions: Sequence[str] = AUDIO_EXTENSIONS
) -> Tuple[List[Path], List[Path]]:
    """
    Splits a file list into recognized audio files and rejects.

    The match is an exact, case-sensitive comparison of the file suffix; file
    contents are never inspected. Every reject is logged as a warning, since a
    stray file in the raw audio tree is usually a mistake.

    Args:
        files: The files to classify.
        extensions: The accepted suffixes, including the leading dot.

    Returns:
        A tuple `(accepted, rejected)`.
    """
    accepted: List[Path] = []
    rejected: List[Path] = []
    for file_path in files:
        if file_path.suffix in extensions:
            accepted.append(file_path)
        else:
            logger.warning(f"Found an unexpected file in audio files: {file_path}")
            rejected.append(file_path)
    return accepted, rejected


def find_name_conflicts(assets: Iterable[AudioAsset]) -> List[Tuple[Path, Path]]:
    """
    Finds assets that share a directory and stem but differ in extension.

    Such files would all be encoded to the same output file. The assets are
    grouped by `(directory, stem)` in a single pass; every group with more than
    one member yields each of its unordered pairs exactly once.

    Args:
        assets: The accepted assets.

    Returns:
        The conflicting `(path, path)` pairs, sorted.
    """
    groups: Dict[Tuple[Path, str], List[Path]] = {}
    for asset in assets:
        groups.setdefault(asset.group_key, []).append(asset.path)

    conflicts: List[Tuple[Path, Path]] = []
    for paths in groups.values():
        if len(paths) > 1:
            conflicts.extend(combinations(sorted(paths), 2))
    return sorted(conflicts)


class ProcessAudioFiles:
    """
    Discovers and validates the raw audio files under a source directory.

    Instantiating the class performs the scan: the tree is walked and the files
    are classified. The conflict check is a separate step (`ensure_no_conflicts`)
    so the pipeline can decide when the hard stop happens.

    Attributes:
        source_dir (Path): The root directory that was scanned.
        all_files (Tuple[Path, ...]): Every regular file found.
        rejected_files (Tuple[Path, ...]): Files without a recognized extension.
        assets (Tuple[AudioAsset, ...]): The recognized audio files, sorted by path.
    """

    def __init__(self, source_dir: Path, extensions: Sequence[str] = AUDIO_EXTENSIONS):
        self.source_dir = source_dir.resolve()
        self.extensions = tuple(extensions)
        self.all_files: Tuple[Path, ...] = tuple()
        self.rejected_files: Tuple[Path, ...] = tuple()
        self.assets: Tuple[AudioAsset, ...] = tuple()
        self.set_files_to_process()

    def set_files_to_process(self):
        """Walks `source_dir` and populates `all_files`, `rejected_files` and `assets`."""
        logger.info(
            f"Searching for audio files in {self.source_dir} ending with {'/'.join(self.extensions)}."
        )
        self.all_files = tuple(walk_files(self.source_dir))
        accepted, rejected = classify_files(self.all_files, self.extensions)
        self.rejected_files = tuple(sorted(rejected))
        self.assets = tuple(AudioAsset(path, self.source_dir) for path in sorted(accepted))
        logger.info(
            f"\tFound {plural(len(self.assets), 'file')} "
            f"({len(self.all_files)} scanned, {len(self.rejected_files)} rejected)"
        )

    def ensure_no_conflicts(self):
        """
        Stops the run if any two assets would produce the same output file.

        Raises:
            ConflictError: Lists every conflicting pair.
        """
        logger.info("Checking for files that only differ by extension...")
        conflicts = find_name_conflicts(self.assets)
        if not conflicts:
            logger.info("\tNo files matched.")
            return

        for first, second in conflicts:
            logger.error(
                f"{first.relative_to(self.source_dir)} has similar name to {second.relative_to(self.source_dir)}!"
            )
        pairs_text = "; ".join(f"{first} <-> {second}" for first, second in conflicts)
        raise ConflictError(
            "Similar file names found in raw audio folder! These must be corrected "
            f"before continuing: {pairs_text}",
            conflicts,
        )
