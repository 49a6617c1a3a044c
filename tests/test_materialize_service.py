"""Unit tests for OutputMaterializer."""

import shutil
from pathlib import Path

import pytest

from audio_compressor.domain.exceptions import MaterializeError, ScanError
from audio_compressor.services.materialize_service import OutputMaterializer


@pytest.fixture
def compressed_dir(tmp_path: Path, write_files) -> Path:
    root = tmp_path / "compressed"
    write_files(root, "a.opus", "b/c.opus", "b/d/e.opus")
    return root


class TestOutputMaterializer:
    def test_copies_tree_preserving_layout(self, compressed_dir: Path, tmp_path: Path, list_tree) -> None:
        target = tmp_path / "dist" / "audio"

        summary = OutputMaterializer(workers=2).run(compressed_dir, target)

        assert list_tree(target) == ["a.opus", "b/c.opus", "b/d/e.opus"]
        assert (target / "b" / "c.opus").read_bytes() == (compressed_dir / "b" / "c.opus").read_bytes()
        assert len(summary.copied) == 3
        assert summary.copied_bytes == sum(p.stat().st_size for p in compressed_dir.rglob("*.opus"))
        assert summary.target_dir == target.resolve()

    def test_copies_again_on_every_run(self, compressed_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "dist"
        OutputMaterializer().run(compressed_dir, target)
        (target / "a.opus").write_bytes(b"modified by hand")

        summary = OutputMaterializer().run(compressed_dir, target)

        assert len(summary.copied) == 3
        assert (target / "a.opus").read_bytes() == (compressed_dir / "a.opus").read_bytes()

    def test_same_directory_is_a_no_op(self, compressed_dir: Path) -> None:
        summary = OutputMaterializer().run(compressed_dir, compressed_dir)

        assert summary.copied == []

    def test_missing_compressed_dir_raises_scan_error(self, tmp_path: Path) -> None:
        with pytest.raises(ScanError):
            OutputMaterializer().run(tmp_path / "missing", tmp_path / "dist")

    def test_copy_failure_raises_materialize_error(
        self, compressed_dir: Path, tmp_path: Path, monkeypatch
    ) -> None:
        def failing_copy(src, dst, *args, **kwargs):
            raise PermissionError(13, "Permission denied", str(dst))

        monkeypatch.setattr(shutil, "copy2", failing_copy)

        with pytest.raises(MaterializeError) as exc_info:
            OutputMaterializer(workers=1).run(compressed_dir, tmp_path / "dist")

        assert exc_info.value.phase == "materialize"
        assert exc_info.value.path.suffix == ".opus"
