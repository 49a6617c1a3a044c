"""
The audio compression pipeline and its host build hooks.

A host build creates one `AudioCompressorPipeline` with a resolved
`PipelineConfig` and calls:
- `on_start()` before it bundles anything. This scans the raw audio tree,
  refuses conflicting names, probes ffmpeg and encodes every stale file.
- `on_finalize(host)` after a build (post variant only). This copies the
  compressed tree into the build output, but only for a production build.

Both hooks raise on failure; the host is expected to stop its build.
"""
from datetime import datetime
from typing import Optional

from loguru import logger

from ..config.common import FAILURE_POLICY_CONTINUE
from ..config.pipeline import HostBuildContext, PipelineConfig
from ..domain.exceptions import CapabilityError, EncodeError
from ..domain.media import EncodeTask
from ..domain.reports import MaterializeSummary, PipelineReport
from ..services.audio_encoder import TranscodeExecutor
from ..services.file_processing_service import ProcessAudioFiles
from ..services.materialize_service import OutputMaterializer
from ..utils.format_utils import format_timedelta, plural
from ..utils.module_updater import Modules


class AudioCompressorPipeline:
    """
    Orchestrates one run of the compression pipeline.

    Attributes:
        config (PipelineConfig): The validated configuration snapshot.
        process_files_handler (ProcessAudioFiles | None): The scan of the last `on_start`.
    """

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.process_files_handler: Optional[ProcessAudioFiles] = None

    def on_start(self) -> PipelineReport:
        """
        Runs scan → conflict check → encoder probe → incremental encode.

        Returns:
            The run report.

        Raises:
            ScanError: The source directory cannot be read.
            ConflictError: Two sources would produce the same output; nothing is encoded.
            CapabilityError: ffmpeg/libopus is unusable (abort probe policy); nothing is encoded.
            EncodeError: At least one file failed to encode. Under the `abort`
                         policy this is the first failure; under `continue` it
                         is raised after all other files were processed and
                         lists every failure.
        """
        started_at = datetime.now()
        report = PipelineReport()
        logger.debug(f"Starting pipeline with {self.config}")

        self.process_files_handler = ProcessAudioFiles(self.config.source_dir)
        report.files_found = len(self.process_files_handler.all_files)
        report.rejected = list(self.process_files_handler.rejected_files)
        report.candidates = len(self.process_files_handler.assets)

        self.process_files_handler.ensure_no_conflicts()
        self._probe_encoder()

        # on_finalize walks this tree even when nothing was encoded.
        try:
            self.config.dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise EncodeError(
                f"Could not create destination directory {self.config.dest_dir}: {e}",
                path=self.config.dest_dir,
            ) from e

        tasks = [
            EncodeTask(asset, self.config.dest_dir)
            for asset in self.process_files_handler.assets
        ]
        executor = TranscodeExecutor(
            bitrate=self.config.bitrate,
            workers=self.config.workers,
            failure_policy=self.config.encode_failure_policy,
            ffmpeg_cmd=self.config.ffmpeg_cmd,
            error_log_dir=self.config.error_log_dir,
        )
        try:
            report.encode_summary = executor.run(tasks)
        except EncodeError:
            logger.error("audio encode failed!")
            raise

        report.elapsed = datetime.now() - started_at
        failures = report.encode_summary.failed
        if failures:
            failed_paths = ", ".join(str(failure.path) for failure in failures)
            raise EncodeError(
                f"{plural(len(failures), 'file')} failed to encode: {failed_paths}",
                path=failures[0].path,
                stdout=failures[0].stdout,
                stderr=failures[0].stderr,
                returncode=failures[0].returncode,
                failures=failures,
            )

        logger.success(
            f"Audio compression finished in {format_timedelta(report.elapsed)}: "
            f"{report.encoded_count} encoded, {report.skipped_count} up to date, "
            f"{len(report.rejected)} rejected."
        )
        return report

    def on_finalize(self, host: HostBuildContext) -> Optional[MaterializeSummary]:
        """
        Copies the compressed tree into the host build output.

        Runs only for a production build; preview/dev runs are left alone.

        Args:
            host: Snapshot of the host's resolved build settings.

        Returns:
            The copy summary, or None if the host command was not a production build.

        Raises:
            ScanError: The compressed directory cannot be read.
            MaterializeError: A file could not be copied.
        """
        if not host.is_production_build:
            logger.info(f"Host command is '{host.command}', not a production build. Skipping copy.")
            return None

        target_dir = host.out_dir / self.config.dest_subdir
        materializer = OutputMaterializer(workers=self.config.workers)
        return materializer.run(self.config.dest_dir, target_dir)

    def _probe_encoder(self):
        try:
            Modules.probe_encoder(self.config.ffmpeg_cmd, work_dir=self.config.probe_work_dir)
        except CapabilityError as e:
            logger.error(f"{e.message}\n{e.stderr.strip()}")
            if self.config.probe_failure_policy != FAILURE_POLICY_CONTINUE:
                raise
            logger.warning("Continuing without a working encoder probe; encodes will likely fail.")
