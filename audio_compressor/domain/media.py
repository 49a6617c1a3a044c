"""
Domain models for the files the pipeline works on.

An `AudioAsset` is a source file accepted by the classifier. An `EncodeTask`
pairs an asset with its deterministic output path and decides, from file
modification times alone, whether the output has to be regenerated.
"""
from pathlib import Path
from typing import Tuple

from ..config.audio import ENCODED_EXTENSION


class AudioAsset:
    """
    A recognized audio file discovered under the source root.

    Attributes:
        path (Path): The absolute path to the source file.
        source_root (Path): The root the file was discovered under.
        relative_path (Path): `path` relative to `source_root`.
        stem (str): The filename without its extension.
        suffix (str): The extension including the dot, e.g. `.wav`.
    """

    def __init__(self, path: Path, source_root: Path):
        self.path = path
        self.source_root = source_root
        self.relative_path = path.relative_to(source_root)
        self.stem = path.stem
        self.suffix = path.suffix

    @property
    def group_key(self) -> Tuple[Path, str]:
        """Files sharing this key would be encoded to the same output file."""
        return self.path.parent, self.stem

    def __repr__(self) -> str:
        return f"AudioAsset({str(self.relative_path)!r})"


class EncodeTask:
    """
    One source → output encode.

    The output path is derived only from the asset's relative path: the suffix
    is replaced with the encoded extension and the result is re-rooted under
    the destination directory. Two assets can only share an output path if they
    share a directory and stem, which the conflict check rules out beforehand.

    Attributes:
        asset (AudioAsset): The source file.
        output_path (Path): Where the encoded file is written.
    """

    def __init__(self, asset: AudioAsset, dest_root: Path):
        self.asset = asset
        self.output_path = dest_root / asset.relative_path.with_suffix(ENCODED_EXTENSION)

    @property
    def source_path(self) -> Path:
        return self.asset.path

    def is_stale(self) -> bool:
        """
        Decides whether the output has to be (re)encoded.

        The output is stale iff the source modification time is strictly greater
        than the output modification time. A missing output counts as the oldest
        possible timestamp. Only timestamps are compared, so a clock skew or a
        `touch` without a content change can cause a needless encode or a missed one.

        Returns:
            True if the file needs encoding, False if the output is up to date.
        """
        source_mtime = self.source_path.stat().st_mtime_ns
        try:
            output_mtime = self.output_path.stat().st_mtime_ns
        except FileNotFoundError:
            return True
        return source_mtime > output_mtime

    def __repr__(self) -> str:
        return f"EncodeTask({str(self.asset.relative_path)!r} -> {str(self.output_path)!r})"
