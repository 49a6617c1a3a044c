"""
Services Package for the Audio Compressor Application.

A service performs one step of the pipeline:

- **File Processing Service (`ProcessAudioFiles`, `walk_files`, ...):**
  Walks the raw audio tree, classifies files by extension and detects files
  that would be encoded to the same output.

- **Encoding Services (`AudioEncoder`, `TranscodeExecutor`):**
  Encode one stale file with ffmpeg, and fan a batch of encodes out over the
  worker pool (`BatchRunner`).

- **Materialize Service (`OutputMaterializer`):**
  Copies the compressed tree into the host build output.

- **Logging Service (`ErrorLog`):**
  Plain-text error records for failed ffmpeg runs, separate from the
  real-time console logging.
"""
