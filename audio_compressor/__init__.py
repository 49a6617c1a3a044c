"""
Audio Compressor: incremental, parallel compression of a raw audio tree to Opus.

The package is used as a pre-build step by a host build system. The host
constructs a `PipelineConfig`, hands it to an `AudioCompressorPipeline` and
calls its `on_start` hook (and, for the post variant, `on_finalize`).
"""
from .config.pipeline import HostBuildContext, PipelineConfig
from .pipeline.audio_pipeline import AudioCompressorPipeline

__all__ = ["AudioCompressorPipeline", "HostBuildContext", "PipelineConfig"]
