"""
Main entry point for the Audio Compressor application.

This module configures logging, resolves the pipeline configuration from the
command line and the user config file, and runs the pipeline hooks the way a
host build would.
"""

import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from tqdm import tqdm

from .cli import get_args
from .config.audio import DEFAULT_BITRATE
from .config.common import LOGGER_FORMAT, FAILURE_POLICY_ABORT, UserConfig, load_user_config
from .config.pipeline import HostBuildContext, PipelineConfig
from .domain.exceptions import AudioCompressorException
from .pipeline.audio_pipeline import AudioCompressorPipeline
from .utils.module_updater import Modules


def configure_logging(level: str):
    """Routes loguru through `tqdm.write` so log lines do not break progress bars."""
    logger.remove()
    logger.add(
        lambda message: tqdm.write(message, end="", file=sys.stderr),
        level=level,
        format=LOGGER_FORMAT,
        colorize=sys.stderr.isatty(),
    )


def build_config(args, user_config: UserConfig) -> PipelineConfig:
    """
    Merges command-line arguments over the user config file's `pipeline` section.

    Raises:
        ConfigurationError: The merged values are invalid.
    """
    file_values = user_config.pipeline

    def pick(name: str, default=None):
        value = getattr(args, name, None)
        if value is not None:
            return value
        return file_values.get(name, default)

    return PipelineConfig(
        source_dir=pick("source_dir"),
        dest_dir=pick("dest_dir"),
        bitrate=pick("bitrate", DEFAULT_BITRATE),
        workers=pick("workers"),
        encode_failure_policy=pick("encode_failure_policy", FAILURE_POLICY_ABORT),
        probe_failure_policy=pick("probe_failure_policy", FAILURE_POLICY_ABORT),
        dest_subdir=pick("dest_subdir", ""),
        ffmpeg_cmd=Modules.get_ffmpeg_path(user_config.ffmpeg_dir),
        error_log_dir=pick("error_log_dir"),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs the Audio Compressor.

    Returns:
        The process exit status: 0 on success, 1 if any phase failed.
    """
    args = get_args(argv)
    configure_logging(args.log_level)
    logger.debug(f"Parsed arguments: {args}")

    try:
        user_config = load_user_config(Path(args.config) if args.config else None)
        config = build_config(args, user_config)
        Modules.update(user_config.module_update_dir, user_config.ffmpeg_dir)
        # The update may have installed the configured ffmpeg.
        config.ffmpeg_cmd = Modules.get_ffmpeg_path(user_config.ffmpeg_dir)

        pipeline = AudioCompressorPipeline(config)
        pipeline.on_start()
        if args.post:
            pipeline.on_finalize(
                HostBuildContext(command=args.host_command, out_dir=args.build_out_dir)
            )
    except AudioCompressorException as e:
        location = f" ({e.path})" if e.path else ""
        logger.error(f"Audio compression failed in phase '{e.phase}'{location}: {e.message}")
        return 1

    logger.success("Audio Compressor process finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
