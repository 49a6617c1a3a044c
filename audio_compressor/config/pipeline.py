"""
Per-run configuration for the compression pipeline.

`PipelineConfig` is the resolved snapshot handed to the pipeline by the host
build. All validation happens in its constructor, so an invalid configuration
is rejected before any directory is scanned. `HostBuildContext` is the snapshot
of the host's own resolved build settings, passed explicitly to the
finalization hook.
"""
from pathlib import Path
from typing import Optional, Union

from ..domain.exceptions import ConfigurationError
from .audio import DEFAULT_BITRATE, MAX_BITRATE, MIN_BITRATE
from .common import (
    DEFAULT_HOST_OUT_DIR,
    DEFAULT_WORKERS,
    FAILURE_POLICIES,
    FAILURE_POLICY_ABORT,
    HOST_COMMAND_BUILD,
)

PathLike = Union[str, Path]


def _require_dir(value: Optional[PathLike], name: str) -> Path:
    if value is None or not str(value).strip():
        raise ConfigurationError(f"{name} cannot be empty!")
    return Path(value).resolve()


def _require_policy(value: str, name: str) -> str:
    if value not in FAILURE_POLICIES:
        raise ConfigurationError(
            f"{name} must be one of {', '.join(FAILURE_POLICIES)}, got '{value}'"
        )
    return value


class PipelineConfig:
    """
    The validated configuration of one pipeline run.

    Attributes:
        source_dir (Path): Root of the raw audio tree.
        dest_dir (Path): Root of the compressed audio tree (the incremental cache).
        bitrate (int): Target Opus bitrate in bits per second.
        workers (int): Size of the worker pool for encodes and copies.
        encode_failure_policy (str): `abort` or `continue` for per-file encode failures.
        probe_failure_policy (str): `abort` or `continue` for a failed encoder probe.
        dest_subdir (str): Relative folder under the host build output that receives
                           the materialized tree (post variant only).
        ffmpeg_cmd (str): Command or absolute path used to run ffmpeg.
        error_log_dir (Path | None): If set, encode failures are also appended to a
                                     plain-text error log in this directory.
        probe_work_dir (Path): Directory where the probe writes its throwaway file.
    """

    def __init__(
        self,
        source_dir: Optional[PathLike],
        dest_dir: Optional[PathLike],
        bitrate: int = DEFAULT_BITRATE,
        workers: Optional[int] = None,
        encode_failure_policy: str = FAILURE_POLICY_ABORT,
        probe_failure_policy: str = FAILURE_POLICY_ABORT,
        dest_subdir: str = "",
        ffmpeg_cmd: str = "ffmpeg",
        error_log_dir: Optional[PathLike] = None,
        probe_work_dir: Optional[PathLike] = None,
    ):
        self.source_dir = _require_dir(source_dir, "source_dir")
        self.dest_dir = _require_dir(dest_dir, "dest_dir")

        # bool is an int subclass; True is not a bitrate.
        if isinstance(bitrate, bool) or not isinstance(bitrate, int):
            raise ConfigurationError(f"bitrate must be an integer, got {bitrate!r}")
        if bitrate < MIN_BITRATE or bitrate > MAX_BITRATE:
            raise ConfigurationError(f"bitrate must be between {MIN_BITRATE} and {MAX_BITRATE}")
        self.bitrate = bitrate

        if workers is None:
            workers = DEFAULT_WORKERS
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ConfigurationError(f"workers must be a positive integer, got {workers!r}")
        self.workers = workers

        self.encode_failure_policy = _require_policy(encode_failure_policy, "encode_failure_policy")
        self.probe_failure_policy = _require_policy(probe_failure_policy, "probe_failure_policy")

        if Path(dest_subdir).is_absolute():
            raise ConfigurationError(f"dest_subdir must be relative, got '{dest_subdir}'")
        self.dest_subdir = dest_subdir
        self.ffmpeg_cmd = ffmpeg_cmd
        self.error_log_dir = Path(error_log_dir).resolve() if error_log_dir else None
        self.probe_work_dir = Path(probe_work_dir).resolve() if probe_work_dir else Path.cwd()

    def __repr__(self) -> str:
        return (
            f"PipelineConfig(source_dir={str(self.source_dir)!r}, dest_dir={str(self.dest_dir)!r}, "
            f"bitrate={self.bitrate}, workers={self.workers}, "
            f"encode_failure_policy={self.encode_failure_policy!r}, "
            f"probe_failure_policy={self.probe_failure_policy!r})"
        )


class HostBuildContext:
    """
    Snapshot of the host build's resolved settings, captured when the host
    finishes resolving its configuration and passed to the finalize hook.

    Attributes:
        command (str): The host command that ran, e.g. `build` or `serve`.
        out_dir (Path): The host's resolved build output directory.
    """

    def __init__(self, command: str = HOST_COMMAND_BUILD, out_dir: Optional[PathLike] = None):
        self.command = command
        self.out_dir = Path(out_dir or DEFAULT_HOST_OUT_DIR).resolve()

    @property
    def is_production_build(self) -> bool:
        return self.command == HOST_COMMAND_BUILD
