"""Shared test fixtures for the Audio Compressor."""

import subprocess
from pathlib import Path
from typing import List

import pytest
from loguru import logger

from audio_compressor.config.pipeline import PipelineConfig
from audio_compressor.utils.module_updater import Modules


class FakeFFmpeg:
    """Stands in for `run_cmd`: records each command and writes its output file."""

    def __init__(self, fail_for=(), returncode: int = 1):
        self.calls: List[List[str]] = []
        self.fail_for = set(fail_for)
        self.returncode = returncode

    def __call__(self, cmd_list, src_file_for_log=Path(), error_log_dir=None, show_cmd=False):
        self.calls.append(list(cmd_list))
        source = Path(cmd_list[cmd_list.index("-i") + 1])
        if source.name in self.fail_for:
            return subprocess.CompletedProcess(
                cmd_list, self.returncode, stdout="", stderr=f"{source.name}: Invalid data found"
            )
        output = Path(cmd_list[-1])
        output.write_bytes(b"OggS" + source.read_bytes())
        return subprocess.CompletedProcess(cmd_list, 0, stdout="", stderr="")

    @property
    def encoded_sources(self) -> List[str]:
        return sorted(Path(cmd[cmd.index("-i") + 1]).name for cmd in self.calls)


@pytest.fixture
def fake_ffmpeg(monkeypatch) -> FakeFFmpeg:
    """Replace the ffmpeg invocation used for per-file encodes."""
    fake = FakeFFmpeg()
    monkeypatch.setattr("audio_compressor.services.audio_encoder.run_cmd", fake)
    return fake


@pytest.fixture
def probe_calls(monkeypatch) -> List[str]:
    """Replace the encoder probe with a recorder that always succeeds."""
    calls: List[str] = []

    def fake_probe(ffmpeg_cmd="ffmpeg", work_dir=None):
        calls.append(ffmpeg_cmd)

    monkeypatch.setattr(Modules, "probe_encoder", staticmethod(fake_probe))
    return calls


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "raw-audio"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    return tmp_path / "compressed-audio"


@pytest.fixture
def make_config(source_dir: Path, dest_dir: Path, tmp_path: Path):
    """Build a PipelineConfig for the temporary source/destination dirs."""

    def _make(**overrides) -> PipelineConfig:
        options = dict(
            source_dir=source_dir,
            dest_dir=dest_dir,
            workers=2,
            probe_work_dir=tmp_path,
        )
        options.update(overrides)
        return PipelineConfig(**options)

    return _make


@pytest.fixture
def log_messages():
    """Collect loguru output as `LEVEL|message` strings."""
    messages: List[str] = []
    handler_id = logger.add(lambda msg: messages.append(msg.rstrip("\n")), format="{level}|{message}", level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def write_files():
    """Factory creating small files under a root, including parent directories."""

    def _write(root: Path, *relative_paths: str) -> List[Path]:
        created = []
        for relative_path in relative_paths:
            path = root / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(relative_path.encode("utf-8"))
            created.append(path)
        return created

    return _write


@pytest.fixture
def list_tree():
    """Factory listing the regular files under a root as sorted POSIX-style relative paths."""

    def _list(root: Path) -> List[str]:
        if not root.exists():
            return []
        return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())

    return _list
