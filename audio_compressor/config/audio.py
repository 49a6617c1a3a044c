"""
Configuration settings related to audio processing.

This module defines the recognized source extensions, the target codec and the
bitrate limits. The values here are the fixed contract of the pipeline; the
per-run knobs (directories, bitrate, workers) live in `PipelineConfig`.
"""

# ======================================================================================
# Audio File Identification
# ======================================================================================

# Source extensions accepted by the classifier. Matching is an exact,
# case-sensitive suffix comparison, so `song.MP3` is rejected.
AUDIO_EXTENSIONS = (".mp3", ".wav")


# ======================================================================================
# Audio Encoding Parameters
# ======================================================================================

# The ffmpeg audio encoder used for every output file.
DEFAULT_AUDIO_ENCODER = "libopus"

# Extension of every encoded output file. Must stay in sync with the encoder.
ENCODED_EXTENSION = ".opus"

# Target bitrate in bits per second when none is configured.
DEFAULT_BITRATE = 160_000

# Closed range accepted for the bitrate. The upper bound is the one that is both
# enforced and reported in the validation error message.
MIN_BITRATE = 0
MAX_BITRATE = 256_000


# ======================================================================================
# Encoder Probe
# ======================================================================================

# A one second synthetic tone generated by ffmpeg's lavfi device. Encoding it
# proves that ffmpeg runs and that it was built with the required encoder.
PROBE_TONE_SOURCE = "sine=frequency=1000:duration=1"

# The throwaway file written by the probe encode. It is always removed afterwards.
PROBE_OUTPUT_NAME = f".audio_compressor_probe{ENCODED_EXTENSION}"
