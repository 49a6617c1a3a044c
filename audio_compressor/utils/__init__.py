"""
Utilities Package for the Audio Compressor Application.

Modules:
    - ffmpeg_utils.py: Builds ffmpeg commands and runs external processes.
    - format_utils.py: Human-readable formatting of durations, sizes and counts.
    - module_updater.py: Locates, updates and probes the ffmpeg executable.
"""
