"""Unit tests for AudioAsset and EncodeTask."""

import os
from pathlib import Path

import pytest

from audio_compressor.domain.media import AudioAsset, EncodeTask

SECOND_NS = 1_000_000_000


def _set_mtime(path: Path, mtime_ns: int) -> None:
    os.utime(path, ns=(mtime_ns, mtime_ns))


@pytest.fixture
def task(source_dir: Path, dest_dir: Path, write_files) -> EncodeTask:
    (source_file,) = write_files(source_dir, "music/track.wav")
    return EncodeTask(AudioAsset(source_file, source_dir), dest_dir)


class TestAudioAsset:
    def test_derived_names(self, tmp_path: Path) -> None:
        asset = AudioAsset(tmp_path / "b" / "c.wav", tmp_path)

        assert asset.relative_path == Path("b") / "c.wav"
        assert asset.stem == "c"
        assert asset.suffix == ".wav"
        assert asset.group_key == (tmp_path / "b", "c")

    def test_dotted_stem_keeps_inner_dots(self, tmp_path: Path) -> None:
        asset = AudioAsset(tmp_path / "intro.v2.mp3", tmp_path)

        assert asset.stem == "intro.v2"


class TestEncodeTask:
    """Tests for output path mapping and the staleness check."""

    def test_output_path_mirrors_source_layout(self, task: EncodeTask, dest_dir: Path) -> None:
        assert task.output_path == dest_dir / "music" / "track.opus"

    def test_only_last_suffix_is_replaced(self, tmp_path: Path) -> None:
        task = EncodeTask(AudioAsset(tmp_path / "intro.v2.mp3", tmp_path), tmp_path / "out")

        assert task.output_path == tmp_path / "out" / "intro.v2.opus"

    def test_missing_output_is_stale(self, task: EncodeTask) -> None:
        assert not task.output_path.exists()
        assert task.is_stale() is True

    def test_newer_source_is_stale(self, task: EncodeTask) -> None:
        task.output_path.parent.mkdir(parents=True)
        task.output_path.write_bytes(b"old")
        _set_mtime(task.output_path, 1_000 * SECOND_NS)
        _set_mtime(task.source_path, 2_000 * SECOND_NS)

        assert task.is_stale() is True

    def test_older_source_is_up_to_date(self, task: EncodeTask) -> None:
        task.output_path.parent.mkdir(parents=True)
        task.output_path.write_bytes(b"fresh")
        _set_mtime(task.source_path, 1_000 * SECOND_NS)
        _set_mtime(task.output_path, 2_000 * SECOND_NS)

        assert task.is_stale() is False

    def test_equal_timestamps_are_up_to_date(self, task: EncodeTask) -> None:
        task.output_path.parent.mkdir(parents=True)
        task.output_path.write_bytes(b"same")
        _set_mtime(task.source_path, 1_500 * SECOND_NS)
        _set_mtime(task.output_path, 1_500 * SECOND_NS)

        assert task.is_stale() is False

    def test_missing_source_raises(self, task: EncodeTask) -> None:
        task.source_path.unlink()

        with pytest.raises(FileNotFoundError):
            task.is_stale()
