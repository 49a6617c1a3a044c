"""
This module provides the Modules class to handle the verification and updating
of ffmpeg, the external tool the pipeline delegates encoding to.
"""
import shutil
import sys
from pathlib import Path
from typing import Optional

import ffmpeg
from loguru import logger

from ..config.audio import DEFAULT_AUDIO_ENCODER, PROBE_OUTPUT_NAME
from ..domain.exceptions import CapabilityError
from .ffmpeg_utils import build_probe_stream


class Modules:
    """
    Operations related to the ffmpeg executable.

    It locates ffmpeg (a configured directory first, then the system PATH),
    applies drop-in updates, and probes that the located binary can actually
    encode with the required codec.
    """

    @staticmethod
    def update(module_update_dir: Optional[Path], ffmpeg_dir: Optional[Path]):
        """
        Moves the contents of `module_update_dir` into `ffmpeg_dir`.

        This provides a simple mechanism for users to drop in a new ffmpeg build.
        Nothing happens if no update directory is configured.

        Args:
            module_update_dir: The drop-in directory, or None.
            ffmpeg_dir: The configured ffmpeg directory that receives the update.
        """
        if not module_update_dir:
            logger.debug("`module_update_dir` not configured. Skipping module update check.")
            return

        if not ffmpeg_dir:
            logger.error(
                f"Cannot perform update: the update path '{module_update_dir}' is set, but `ffmpeg_dir` is not."
            )
            return

        if not module_update_dir.is_dir():
            logger.warning(f"Configured module update directory '{module_update_dir}' does not exist. Skipping update.")
            return

        update_files_found = sorted(module_update_dir.iterdir())
        if not update_files_found:
            logger.info("No files found in module update directory. Nothing to do.")
            return

        logger.info(f"Updating ffmpeg from '{module_update_dir}' to '{ffmpeg_dir}'...")
        ffmpeg_dir.mkdir(parents=True, exist_ok=True)
        for update_item_path in update_files_found:
            destination_path = ffmpeg_dir / update_item_path.name
            try:
                # Replace directories wholesale instead of merging them.
                if destination_path.is_dir() and update_item_path.is_dir():
                    shutil.rmtree(destination_path)
                shutil.move(str(update_item_path), str(destination_path))
                logger.info(f"Moved '{update_item_path.name}' to '{destination_path}'")
            except OSError as e:
                logger.error(f"Failed to move '{update_item_path.name}' to '{destination_path}': {e}")

    @staticmethod
    def get_ffmpeg_path(ffmpeg_dir: Optional[Path] = None) -> str:
        """
        Determines the ffmpeg executable to use.

        Args:
            ffmpeg_dir: Optional configured directory containing ffmpeg.

        Returns:
            The absolute path to ffmpeg in `ffmpeg_dir` if it exists there,
            otherwise "ffmpeg" (resolved through the system PATH).
        """
        ffmpeg_exe_name = "ffmpeg.exe" if sys.platform == "win32" else "ffmpeg"

        if ffmpeg_dir and ffmpeg_dir.is_dir():
            configured_ffmpeg_path = ffmpeg_dir / ffmpeg_exe_name
            if configured_ffmpeg_path.is_file():
                logger.debug(f"Using ffmpeg from configured path: '{configured_ffmpeg_path}'")
                return str(configured_ffmpeg_path)
            logger.warning(
                f"`ffmpeg_dir` is configured, but '{ffmpeg_exe_name}' was not found there. Falling back to system PATH."
            )

        return "ffmpeg"

    @staticmethod
    def probe_encoder(ffmpeg_cmd: str = "ffmpeg", work_dir: Optional[Path] = None):
        """
        Verifies that ffmpeg runs and supports the target encoder.

        A one second synthetic tone is encoded into a throwaway file in
        `work_dir`. The file is removed afterwards whether the probe succeeded
        or not.

        Args:
            ffmpeg_cmd: Command or path used to run ffmpeg.
            work_dir: Directory for the throwaway file (defaults to the cwd).

        Raises:
            CapabilityError: ffmpeg is missing or the probe encode failed. The
                             captured ffmpeg output is attached.
        """
        probe_output = (work_dir or Path.cwd()) / PROBE_OUTPUT_NAME
        logger.info(f"Checking for ffmpeg with {DEFAULT_AUDIO_ENCODER}...")
        probe_output.unlink(missing_ok=True)
        try:
            ffmpeg.run(
                build_probe_stream(probe_output),
                cmd=ffmpeg_cmd,
                capture_stdout=True,
                capture_stderr=True,
            )
        except ffmpeg.Error as e:
            stdout = (e.stdout or b"").decode("utf-8", errors="replace")
            stderr = (e.stderr or b"").decode("utf-8", errors="replace")
            raise CapabilityError(
                f"ffmpeg check failed, no ffmpeg with {DEFAULT_AUDIO_ENCODER} found!",
                stdout=stdout,
                stderr=stderr,
            ) from e
        except OSError as e:
            raise CapabilityError(
                f"ffmpeg check failed, could not run '{ffmpeg_cmd}': {e}",
                stderr=str(e),
            ) from e
        finally:
            probe_output.unlink(missing_ok=True)
        logger.info("\tFound suitable ffmpeg.")
