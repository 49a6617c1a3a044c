"""
This package contains the core domain models of the Audio Compressor application.

The domain layer describes what the pipeline works on, independent of how files
are discovered or how ffmpeg is invoked.

Modules:
    exceptions.py: The exception hierarchy, one exception type per pipeline
                   phase that can stop a build.
    media.py: `AudioAsset` (an accepted source file) and `EncodeTask` (the
              source → output mapping together with its staleness check).
    reports.py: Summaries returned by the batch phases and by a whole run.
"""
