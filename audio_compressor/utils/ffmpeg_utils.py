"""
This module provides utility functions for building and running ffmpeg commands.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

import ffmpeg
from loguru import logger

from ..config.audio import DEFAULT_AUDIO_ENCODER, PROBE_TONE_SOURCE
from ..services.logging_service import ErrorLog


def display_cmd(cmd_list: List[str]) -> str:
    """Quotes a command list for display, the way the current platform's shell would."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def build_encode_cmd(ffmpeg_cmd: str, source: Path, output: Path, bitrate: int) -> List[str]:
    """
    Builds the single-pass transcode command for one file.

    ffmpeg only prints warnings and errors (`-loglevel error`) and always
    overwrites the output (`-y`); the staleness check already decided that the
    existing output is out of date.

    Args:
        ffmpeg_cmd: Command or path used to run ffmpeg.
        source: The source audio file.
        output: The output file to write.
        bitrate: Target bitrate in bits per second.

    Returns:
        The command as a list of arguments.
    """
    return [
        ffmpeg_cmd,
        "-loglevel", "error",
        "-y",
        "-i", str(source),
        "-c:a", DEFAULT_AUDIO_ENCODER,
        "-b:a", str(bitrate),
        str(output),
    ]


def build_probe_stream(output: Path):
    """
    Builds the ffmpeg-python stream for the encoder capability probe.

    The input is a one second synthetic tone from the lavfi device, encoded with
    the target encoder into `output`.
    """
    return ffmpeg.input(PROBE_TONE_SOURCE, f="lavfi", loglevel="error").output(
        str(output), acodec=DEFAULT_AUDIO_ENCODER
    )


def run_cmd(
    cmd_list: List[str],
    src_file_for_log: Path = Path(),
    error_log_dir: Optional[Path] = None,
    show_cmd: bool = False,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command and captures its output.

    This is a wrapper around `subprocess.run` that adds logging. A nonzero exit
    code is not treated as an exception here; the caller inspects `returncode`.
    No timeout is applied, so a hung process blocks its worker.

    Args:
        cmd_list: The command to execute as a list of arguments.
        src_file_for_log: The source file being processed, used for logging context.
        error_log_dir: If set, a record is appended to the error log in this
                       directory when the command cannot be started.
        show_cmd: If True, the command is logged at DEBUG level before execution.

    Returns:
        A `subprocess.CompletedProcess` with the return code and captured
        stdout/stderr, or `None` if the command could not be started
        (e.g. the executable was not found).
    """
    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = display_cmd(cmd_list)
    if show_cmd:
        logger.debug(f"Executing command: {display_cmd_str}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except OSError as e:
        # FileNotFoundError / PermissionError: the executable itself is unusable.
        logger.error(f"Could not run '{cmd_list[0]}' for {src_file_for_log}: {e}")
        if error_log_dir and src_file_for_log.name:
            ErrorLog(error_log_dir).write(
                f"Command execution error for: {src_file_for_log}",
                f"Command: {display_cmd_str}",
                f"Exception: {type(e).__name__} - {e}",
            )
        return None

    if result.stdout:
        logger.trace(f"Command stdout: {result.stdout[:500]}")
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr}")

    return result
