"""
This module defines the encoding services of the Audio Compressor.

`AudioEncoder` handles one `EncodeTask`: it prepares the output directory,
asks the staleness check whether work is needed and runs ffmpeg.
`TranscodeExecutor` fans a list of tasks out over the worker pool and
summarizes the outcome.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from ..config.audio import DEFAULT_AUDIO_ENCODER, DEFAULT_BITRATE
from ..config.common import DEFAULT_WORKERS, FAILURE_POLICY_ABORT
from ..domain.exceptions import EncodeError
from ..domain.media import EncodeTask
from ..domain.reports import EncodeSummary
from ..utils.ffmpeg_utils import build_encode_cmd, display_cmd, run_cmd
from ..utils.format_utils import plural
from .batch_base import BatchRunner
from .logging_service import ErrorLog


class AudioEncoder:
    """
    Encodes a single source file to Opus when its output is stale.

    Attributes:
        task (EncodeTask): The source → output mapping to process.
        target_bit_rate (int): The target bitrate in bits per second.
        ffmpeg_cmd (str): Command or path used to run ffmpeg.
        error_log_dir (Path | None): Where failures are also written as text, if set.
        encode_cmd_list (List[str]): The last command built by `encode`.
    """

    def __init__(
        self,
        task: EncodeTask,
        target_bit_rate: int = DEFAULT_BITRATE,
        ffmpeg_cmd: str = "ffmpeg",
        error_log_dir: Optional[Path] = None,
    ):
        self.task = task
        self.target_bit_rate = target_bit_rate
        self.ffmpeg_cmd = ffmpeg_cmd
        self.error_log_dir = error_log_dir
        self.encoder_codec_name = DEFAULT_AUDIO_ENCODER
        self.encode_cmd_list: List[str] = []

    def start(self) -> bool:
        """
        Encodes the task if needed.

        The output directory is created first, then the staleness check decides
        between encoding and skipping.

        Returns:
            True if ffmpeg was run, False if the output was already up to date.

        Raises:
            EncodeError: The output directory or the timestamps could not be
                         accessed, or ffmpeg failed.
        """
        source = self.task.source_path
        output_dir = self.task.output_path.parent
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise EncodeError(f"Could not create output directory {output_dir}: {e}", path=source) from e

        try:
            stale = self.task.is_stale()
        except OSError as e:
            raise EncodeError(f"Could not read modification time of {source}: {e}", path=source) from e

        if not stale:
            logger.trace(f"Up to date: {self.task.output_path}")
            return False

        self.encode()
        return True

    def encode(self):
        """
        Runs ffmpeg for the task.

        Raises:
            EncodeError: ffmpeg could not be started, exited with a nonzero
                         code, or did not produce the output file. The captured
                         stdout/stderr are attached.
        """
        source = self.task.source_path
        output = self.task.output_path
        self.encode_cmd_list = build_encode_cmd(self.ffmpeg_cmd, source, output, self.target_bit_rate)

        res = run_cmd(
            self.encode_cmd_list,
            src_file_for_log=source,
            error_log_dir=self.error_log_dir,
            show_cmd=__debug__,
        )
        if res is None:
            self.failed_action("", "", -1)
            raise EncodeError(
                f"Audio encode failed for {source}: could not run '{self.ffmpeg_cmd}'",
                path=source,
                returncode=-1,
            )
        if res.returncode != 0:
            self.failed_action(res.stdout, res.stderr, res.returncode)
            raise EncodeError(
                f"Audio encode failed for {source} (exit code {res.returncode})",
                path=source,
                stdout=res.stdout,
                stderr=res.stderr,
                returncode=res.returncode,
            )
        if not output.exists():
            error_msg = f"ffmpeg reported success but output file {output} is missing."
            self.failed_action(res.stdout, f"{res.stderr}\n{error_msg}", res.returncode)
            raise EncodeError(
                f"Audio encode failed for {source}: {error_msg}",
                path=source,
                stdout=res.stdout,
                stderr=res.stderr,
                returncode=res.returncode,
            )
        logger.debug(f"Encoded {source} -> {output}")

    def failed_action(self, stdout: str, stderr: str, return_code: int):
        """Reports a failed encode on the console and, if configured, in the error log."""
        source = self.task.source_path
        logger.error(
            f"Audio encode failed for {source} (rc={return_code})\n"
            f"stdout: {stdout.strip() or '<empty>'}\n"
            f"stderr: {stderr.strip() or '<empty>'}"
        )
        if self.error_log_dir:
            ErrorLog(self.error_log_dir).write(
                f"Encode failed for: {source}",
                f"Command: {display_cmd(self.encode_cmd_list)}",
                f"Return code: {return_code}",
                f"stdout: {stdout}",
                f"stderr: {stderr}",
            )


class TranscodeExecutor(BatchRunner):
    """
    Encodes a list of tasks on the worker pool.

    Up-to-date tasks are skipped without running ffmpeg and still advance the
    progress bar. See `BatchRunner` for the failure policies.
    """

    progress_description = "Encoding"

    def __init__(
        self,
        bitrate: int = DEFAULT_BITRATE,
        workers: int = DEFAULT_WORKERS,
        failure_policy: str = FAILURE_POLICY_ABORT,
        ffmpeg_cmd: str = "ffmpeg",
        error_log_dir: Optional[Path] = None,
    ):
        super().__init__(workers=workers, failure_policy=failure_policy)
        self.bitrate = bitrate
        self.ffmpeg_cmd = ffmpeg_cmd
        self.error_log_dir = error_log_dir
        self.summary = EncodeSummary()

    def run(self, tasks: Sequence[EncodeTask]) -> EncodeSummary:
        """
        Encodes every stale task.

        Args:
            tasks: The tasks to process.

        Returns:
            The summary of encoded, skipped and (under `continue`) failed files.

        Raises:
            EncodeError: The first failure, under the `abort` policy.
        """
        self.summary = EncodeSummary()
        logger.info(f"Encoding {plural(len(tasks), 'file')} on {plural(self.workers, 'worker')}...")
        failures = self.process_multi_file(tasks)
        self.summary.failed.extend(failures)
        logger.info(
            f"\tEncoded {len(self.summary.encoded)}, "
            f"skipped {len(self.summary.skipped)} up to date, "
            f"{len(self.summary.failed)} failed."
        )
        return self.summary

    def process_single_file(self, task: EncodeTask) -> bool:
        encoder = AudioEncoder(
            task,
            target_bit_rate=self.bitrate,
            ffmpeg_cmd=self.ffmpeg_cmd,
            error_log_dir=self.error_log_dir,
        )
        return encoder.start()

    def on_item_done(self, task: EncodeTask, encoded: bool):
        if encoded:
            self.summary.encoded.append(task.source_path)
        else:
            self.summary.skipped.append(task.source_path)
