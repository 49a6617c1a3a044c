"""
Configuration Package for the Audio Compressor.

This package centralizes the static settings of the application and the
validated per-run configuration:
- `audio.py`: recognized extensions, target codec, bitrate limits, probe settings.
- `common.py`: logging format, failure policies, host defaults and the loader
  for the optional `config.user.yaml` file.
- `pipeline.py`: `PipelineConfig` and `HostBuildContext`, the explicit
  configuration snapshots threaded through the pipeline entry points.
"""
