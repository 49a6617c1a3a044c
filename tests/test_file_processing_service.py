"""Unit tests for the scan phase: tree walking, classification and conflict detection."""

import os
from pathlib import Path

import pytest

from audio_compressor.domain.exceptions import ConflictError, ScanError
from audio_compressor.domain.media import AudioAsset
from audio_compressor.services.file_processing_service import (
    ProcessAudioFiles,
    classify_files,
    find_name_conflicts,
    walk_files,
)


def _relative(paths, root: Path):
    return sorted(Path(p).relative_to(root.resolve()).as_posix() for p in paths)


class TestWalkFiles:
    """Tests for walk_files."""

    def test_lists_files_at_every_depth(self, source_dir: Path, write_files) -> None:
        write_files(source_dir, "a.mp3", "b/c.wav", "b/d/e/f.wav", "notes.txt")

        found = walk_files(source_dir)

        assert _relative(found, source_dir) == ["a.mp3", "b/c.wav", "b/d/e/f.wav", "notes.txt"]
        assert all(p.is_absolute() for p in found)

    def test_empty_directory_yields_nothing(self, source_dir: Path) -> None:
        (source_dir / "empty" / "nested").mkdir(parents=True)

        assert walk_files(source_dir) == []

    def test_deep_nesting_does_not_recurse(self, source_dir: Path) -> None:
        deep = source_dir
        for i in range(200):
            deep = deep / f"d{i}"
        deep.mkdir(parents=True)
        (deep / "deep.wav").write_bytes(b"x")

        found = walk_files(source_dir)

        assert [p.name for p in found] == ["deep.wav"]

    def test_missing_root_raises_scan_error(self, tmp_path: Path) -> None:
        missing = tmp_path / "does-not-exist"

        with pytest.raises(ScanError) as exc_info:
            walk_files(missing)

        assert exc_info.value.phase == "scan"
        assert exc_info.value.path == missing.resolve()

    def test_file_as_root_raises_scan_error(self, tmp_path: Path) -> None:
        not_a_dir = tmp_path / "file.mp3"
        not_a_dir.write_bytes(b"x")

        with pytest.raises(ScanError):
            walk_files(not_a_dir)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlinks_are_neither_followed_nor_returned(
        self, source_dir: Path, tmp_path: Path, write_files
    ) -> None:
        outside = tmp_path / "outside"
        write_files(outside, "linked.wav")
        write_files(source_dir, "real.wav")
        try:
            os.symlink(outside, source_dir / "dir-link", target_is_directory=True)
            os.symlink(outside / "linked.wav", source_dir / "file-link.wav")
        except OSError:
            pytest.skip("cannot create symlinks here")

        found = walk_files(source_dir)

        assert _relative(found, source_dir) == ["real.wav"]

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs not supported")
    def test_special_files_are_skipped(self, source_dir: Path, write_files) -> None:
        write_files(source_dir, "a.wav")
        os.mkfifo(source_dir / "pipe.wav")

        found = walk_files(source_dir)

        assert _relative(found, source_dir) == ["a.wav"]

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="needs POSIX permissions and a non-root user",
    )
    def test_unreadable_subdirectory_is_skipped(self, source_dir: Path, write_files) -> None:
        write_files(source_dir, "a.wav", "locked/b.wav")
        locked = source_dir / "locked"
        locked.chmod(0o000)
        try:
            found = walk_files(source_dir)
        finally:
            locked.chmod(0o755)

        assert _relative(found, source_dir) == ["a.wav"]


class TestClassifyFiles:
    """Tests for classify_files."""

    def test_splits_by_extension(self, tmp_path: Path) -> None:
        files = [tmp_path / "a.mp3", tmp_path / "b.wav", tmp_path / "notes.txt", tmp_path / "c.flac"]

        accepted, rejected = classify_files(files)

        assert accepted == [tmp_path / "a.mp3", tmp_path / "b.wav"]
        assert rejected == [tmp_path / "notes.txt", tmp_path / "c.flac"]

    def test_match_is_case_sensitive(self, tmp_path: Path) -> None:
        accepted, rejected = classify_files([tmp_path / "LOUD.MP3", tmp_path / "quiet.Wav"])

        assert accepted == []
        assert len(rejected) == 2

    def test_file_without_extension_is_rejected(self, tmp_path: Path) -> None:
        accepted, rejected = classify_files([tmp_path / "README", tmp_path / ".wav"])

        assert accepted == []
        assert rejected == [tmp_path / "README", tmp_path / ".wav"]

    def test_every_reject_is_logged(self, tmp_path: Path, log_messages) -> None:
        classify_files([tmp_path / "notes.txt", tmp_path / "cover.png", tmp_path / "a.mp3"])

        warnings = [m for m in log_messages if m.startswith("WARNING|")]
        assert len(warnings) == 2
        assert "notes.txt" in warnings[0]
        assert "cover.png" in warnings[1]


class TestFindNameConflicts:
    """Tests for find_name_conflicts."""

    @staticmethod
    def _assets(root: Path, *names: str):
        return [AudioAsset(root / name, root) for name in names]

    def test_no_conflicts(self, tmp_path: Path) -> None:
        assets = self._assets(tmp_path, "a.mp3", "b.wav", "sub/a.wav")

        assert find_name_conflicts(assets) == []

    def test_same_stem_in_same_directory_conflicts(self, tmp_path: Path) -> None:
        assets = self._assets(tmp_path, "a.wav", "a.mp3", "b.wav")

        assert find_name_conflicts(assets) == [(tmp_path / "a.mp3", tmp_path / "a.wav")]

    def test_same_stem_in_different_directories_does_not_conflict(self, tmp_path: Path) -> None:
        assets = self._assets(tmp_path, "x/a.mp3", "y/a.wav")

        assert find_name_conflicts(assets) == []

    def test_each_pair_reported_once(self, tmp_path: Path) -> None:
        # Three files with one stem form three unordered pairs.
        assets = [
            AudioAsset(tmp_path / "a.mp3", tmp_path),
            AudioAsset(tmp_path / "a.wav", tmp_path),
            AudioAsset(tmp_path / "a.flac", tmp_path),
        ]

        conflicts = find_name_conflicts(assets)

        assert len(conflicts) == 3
        assert len({frozenset(pair) for pair in conflicts}) == 3

    def test_empty_input(self) -> None:
        assert find_name_conflicts([]) == []


class TestProcessAudioFiles:
    """Tests for the ProcessAudioFiles scan handler."""

    def test_scan_populates_files(self, source_dir: Path, write_files) -> None:
        write_files(source_dir, "b/c.wav", "a.mp3", "notes.txt")

        handler = ProcessAudioFiles(source_dir)

        assert len(handler.all_files) == 3
        assert [p.name for p in handler.rejected_files] == ["notes.txt"]
        assert [a.relative_path.as_posix() for a in handler.assets] == ["a.mp3", "b/c.wav"]

    def test_ensure_no_conflicts_passes(self, source_dir: Path, write_files) -> None:
        write_files(source_dir, "a.mp3", "b.wav")

        ProcessAudioFiles(source_dir).ensure_no_conflicts()

    def test_ensure_no_conflicts_raises_with_pairs(
        self, source_dir: Path, write_files, log_messages
    ) -> None:
        write_files(source_dir, "a.mp3", "a.wav", "sub/x.mp3", "sub/x.wav")
        handler = ProcessAudioFiles(source_dir)

        with pytest.raises(ConflictError) as exc_info:
            handler.ensure_no_conflicts()

        error = exc_info.value
        assert error.phase == "conflict-check"
        root = source_dir.resolve()
        assert error.conflicts == [
            (root / "a.mp3", root / "a.wav"),
            (root / "sub" / "x.mp3", root / "sub" / "x.wav"),
        ]
        assert str(root / "a.mp3") in error.message
        assert any("a.mp3 has similar name to a.wav" in m for m in log_messages)
