"""
This package contains the compression pipeline of the Audio Compressor.

The pipeline orchestrates a run for the host build: scanning the raw audio
tree, the pre-flight checks, the incremental encode and, for production
builds, the copy into the build output.
"""
