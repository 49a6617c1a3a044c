"""
Common configuration settings used throughout the application.

This module contains the globally shared constants (logging format, failure
policies, host defaults) and the loader for the optional user configuration
file. The user file lets people point the pipeline at a specific ffmpeg build
or change pipeline defaults without touching the host build configuration.
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

# --- User-Defined Configuration ---

# Default location of the user configuration file, relative to the working directory.
# The environment variable takes precedence when set.
USER_CONFIG_ENV_VAR = "AUDIO_COMPRESSOR_CONFIG"
USER_CONFIG_FILE_NAME = "config.user.yaml"


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

# File name of the plain-text error log written when an error log dir is configured.
ERROR_LOG_FILE_NAME = "error.txt"


# --- Failure Policies ---
# The same policy names are used for the encoder probe and for per-file encodes.

FAILURE_POLICY_ABORT = "abort"  # Stop the run at the first failure.
FAILURE_POLICY_CONTINUE = "continue"  # Log the failure, keep going, report at the end.
FAILURE_POLICIES = (FAILURE_POLICY_ABORT, FAILURE_POLICY_CONTINUE)


# --- Worker Pool ---

# One worker per available processing unit.
DEFAULT_WORKERS = os.cpu_count() or 1


# --- Host Build Defaults ---

# The host command for a genuine production build. Only this command triggers
# materialization of the compressed tree into the build output.
HOST_COMMAND_BUILD = "build"
HOST_COMMAND_SERVE = "serve"
HOST_COMMANDS = (HOST_COMMAND_BUILD, HOST_COMMAND_SERVE)

# The host's build output directory when it does not configure one.
DEFAULT_HOST_OUT_DIR = "dist"


class UserConfig:
    """
    Values read from the optional `config.user.yaml` file.

    Attributes:
        ffmpeg_dir (Path | None): Directory holding the ffmpeg executable. None means
                                  ffmpeg is expected on the system PATH.
        module_update_dir (Path | None): Drop-in directory whose contents replace
                                         `ffmpeg_dir` on startup.
        pipeline (dict): Default values for pipeline options (bitrate, workers, policies).
        source (Path | None): The file the values came from, if any.
    """

    def __init__(
        self,
        ffmpeg_dir: Optional[Path] = None,
        module_update_dir: Optional[Path] = None,
        pipeline: Optional[Dict[str, Any]] = None,
        source: Optional[Path] = None,
    ):
        self.ffmpeg_dir = ffmpeg_dir
        self.module_update_dir = module_update_dir
        self.pipeline = pipeline or {}
        self.source = source


def load_user_config(config_path: Optional[Path] = None) -> UserConfig:
    """
    Loads the user configuration file.

    The lookup order is: the explicit `config_path`, the path in the
    `AUDIO_COMPRESSOR_CONFIG` environment variable, then `config.user.yaml` in the
    current working directory. A missing file yields an empty `UserConfig`; an
    unreadable or malformed file is reported as a warning and ignored.

    Args:
        config_path: Optional explicit path to the YAML file.

    Returns:
        The parsed `UserConfig`.
    """
    if config_path is None:
        env_path = os.environ.get(USER_CONFIG_ENV_VAR)
        config_path = Path(env_path) if env_path else Path.cwd() / USER_CONFIG_FILE_NAME

    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Relying on system PATH for ffmpeg.")
        return UserConfig()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return UserConfig()

    if not isinstance(raw_config, dict):
        logger.warning(f"User config '{config_path}' is not a mapping. Ignoring it.")
        return UserConfig()

    paths_config = raw_config.get("paths") or {}
    if not isinstance(paths_config, dict):
        logger.warning(f"'paths' section in '{config_path}' is not a mapping. Ignoring it.")
        paths_config = {}
    pipeline_config = raw_config.get("pipeline") or {}
    if not isinstance(pipeline_config, dict):
        logger.warning(f"'pipeline' section in '{config_path}' is not a mapping. Ignoring it.")
        pipeline_config = {}

    ffmpeg_dir_str = paths_config.get("ffmpeg_dir")
    update_dir_str = paths_config.get("module_update_dir")

    logger.debug(f"Loaded user config from '{config_path}'.")
    return UserConfig(
        ffmpeg_dir=Path(ffmpeg_dir_str) if ffmpeg_dir_str else None,
        module_update_dir=Path(update_dir_str) if update_dir_str else None,
        pipeline=pipeline_config,
        source=config_path,
    )
