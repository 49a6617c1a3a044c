"""
Command-Line Interface (CLI) setup for the Audio Compressor.

The CLI stands in for a host build: it resolves the configuration from the
command line and the optional user config file, runs the start hook and, with
`--post`, the finalize hook.
"""
import argparse
from typing import List, Optional

from .config.common import (
    DEFAULT_HOST_OUT_DIR,
    FAILURE_POLICIES,
    HOST_COMMAND_BUILD,
    HOST_COMMANDS,
)


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the Audio Compressor.

    Pipeline options default to None so that values from the user config file
    can fill them in; `main.build_config` applies the final defaults.

    Args:
        argv: Arguments to parse. Defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Incrementally compress a raw audio tree (.mp3/.wav) to Opus for a build."
    )
    parser.add_argument(
        "--source-dir", type=str, default=None, help="Directory containing the raw audio files."
    )
    parser.add_argument(
        "--dest-dir", type=str, default=None, help="Directory receiving the compressed .opus files."
    )
    parser.add_argument(
        "--bitrate", type=int, default=None, help="Target bitrate in bits per second (0-256000, default 160000)."
    )
    parser.add_argument(
        "--workers", type=int, default=None, help="Number of parallel encodes (default: number of CPUs)."
    )
    parser.add_argument(
        "--encode-failure-policy", choices=FAILURE_POLICIES, default=None,
        help="What to do when a file fails to encode (default: abort)."
    )
    parser.add_argument(
        "--probe-failure-policy", choices=FAILURE_POLICIES, default=None,
        help="What to do when the ffmpeg/libopus check fails (default: abort)."
    )
    parser.add_argument(
        "--error-log-dir", type=str, default=None,
        help="Also append encode failures to error.txt in this directory."
    )
    parser.add_argument(
        "--post", action="store_true",
        help="After encoding, copy the compressed tree into the build output directory."
    )
    parser.add_argument(
        "--build-out-dir", type=str, default=DEFAULT_HOST_OUT_DIR,
        help="The host's build output directory (used with --post)."
    )
    parser.add_argument(
        "--dest-subdir", type=str, default=None,
        help="Folder inside the build output that receives the compressed tree (used with --post)."
    )
    parser.add_argument(
        "--host-command", choices=HOST_COMMANDS, default=HOST_COMMAND_BUILD,
        help="The host command being run; only 'build' copies into the build output."
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Path to a config.user.yaml file."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )
    return parser.parse_args(argv)
