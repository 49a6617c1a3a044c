"""
Main entry point for running the Audio Compressor from a source checkout.

Installed copies expose the same entry point as the `audio-compressor` command.
"""

import sys

from audio_compressor.main import main

if __name__ == "__main__":
    sys.exit(main())
