"""
Defines custom exception types for the Audio Compressor application.

Every failure that should stop a build is expressed as one of these exceptions.
Each carries the pipeline phase it belongs to, so the host build (or the CLI)
can report which phase failed without inspecting the exception type.

All custom exceptions inherit from the base `AudioCompressorException`.
"""
from pathlib import Path
from typing import List, Optional, Sequence, Tuple


class AudioCompressorException(Exception):
    """Base class for all custom exceptions in the Audio Compressor application."""

    phase: str = "pipeline"

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class ConfigurationError(AudioCompressorException):
    """
    Raised when the pipeline configuration is invalid.

    This covers missing source/destination directories, an out-of-range bitrate
    and unknown failure policies. It is always raised before the filesystem is
    touched.
    """

    phase = "configuration"


class ScanError(AudioCompressorException):
    """
    Raised when a root directory cannot be traversed.

    Only problems with the root itself are fatal. Unreadable subdirectories are
    logged and skipped by the tree walker.
    """

    phase = "scan"


class CapabilityError(AudioCompressorException):
    """
    Raised when ffmpeg is missing or cannot encode with the required codec.

    The captured output of the failed probe encode is kept on the exception so
    the user gets a single clear diagnostic.
    """

    phase = "probe"

    def __init__(self, message: str, stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


class ConflictError(AudioCompressorException):
    """
    Raised when two source files would be encoded to the same output file.

    `foo.mp3` and `foo.wav` in the same directory both map to `foo.opus`.
    Encoding either of them would make the output depend on scheduling order,
    so the whole run is refused until the user renames one of them.
    """

    phase = "conflict-check"

    def __init__(self, message: str, conflicts: Sequence[Tuple[Path, Path]]):
        super().__init__(message)
        self.conflicts: List[Tuple[Path, Path]] = list(conflicts)


class EncodeError(AudioCompressorException):
    """
    Raised when an ffmpeg encode of a specific file fails.

    Files encoded successfully earlier in the same run are left in place.
    When several failures were collected (continue policy), they are available
    in `failures`.
    """

    phase = "encode"

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        stdout: str = "",
        stderr: str = "",
        returncode: Optional[int] = None,
        failures: Optional[Sequence["EncodeError"]] = None,
    ):
        super().__init__(message, path=path)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.failures: List[EncodeError] = list(failures or [])


class MaterializeError(AudioCompressorException):
    """Raised when copying the compressed tree into the build output fails."""

    phase = "materialize"
