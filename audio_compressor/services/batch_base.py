"""
The bounded worker pool shared by the encode and materialize phases.

Each item of a batch is handled by `process_single_file` on a worker thread.
Results are collected on the calling thread as the futures complete, so the
progress bar and the subclass bookkeeping are only ever touched from one
thread.
"""
import concurrent.futures
from typing import Any, List, Sequence

from loguru import logger
from tqdm import tqdm

from ..config.common import DEFAULT_WORKERS, FAILURE_POLICY_ABORT, FAILURE_POLICY_CONTINUE
from ..domain.exceptions import AudioCompressorException


class BatchRunner:
    """
    Runs `process_single_file` for every item on a fixed-size thread pool.

    Threads are enough here: a worker spends its time waiting on an ffmpeg
    child process or on file I/O.

    Failure handling follows `failure_policy`:
    - `abort`: the first `AudioCompressorException` cancels every task that has
      not started yet and is re-raised once the running tasks have finished.
    - `continue`: failures are collected and returned, the batch runs to the end.

    Any other exception is a bug and always aborts the batch.

    Attributes:
        workers (int): Maximum number of items processed at the same time.
        failure_policy (str): `abort` or `continue`.
        progress_description (str): Label of the progress bar.
    """

    progress_description: str = "Processing"

    def __init__(self, workers: int = DEFAULT_WORKERS, failure_policy: str = FAILURE_POLICY_ABORT):
        self.workers = max(1, workers)
        self.failure_policy = failure_policy

    def process_single_file(self, item: Any) -> Any:
        """Handles one item on a worker thread. Subclasses must implement this."""
        raise NotImplementedError("Subclasses must implement process_single_file.")

    def on_item_done(self, item: Any, result: Any):
        """Called on the driving thread with the result of `process_single_file`."""

    def process_multi_file(self, items: Sequence[Any]) -> List[AudioCompressorException]:
        """
        Processes all items and reports progress as each one completes.

        Args:
            items: The items to process.

        Returns:
            The failures collected under the `continue` policy (always empty
            under `abort`, which raises instead).

        Raises:
            AudioCompressorException: The first failure, under the `abort` policy.
        """
        failures: List[AudioCompressorException] = []
        if not items:
            return failures

        with tqdm(total=len(items), desc=self.progress_description, unit="file") as progress_bar:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers) as executor:
                futures = {
                    executor.submit(self.process_single_file, item): item
                    for item in items
                }
                try:
                    for future in concurrent.futures.as_completed(futures):
                        item = futures[future]
                        try:
                            result = future.result()
                        except AudioCompressorException as exc:
                            if self.failure_policy != FAILURE_POLICY_CONTINUE:
                                raise
                            failures.append(exc)
                        else:
                            self.on_item_done(item, result)
                        progress_bar.update(1)
                except BaseException:
                    cancelled = sum(1 for pending in futures if pending.cancel())
                    if cancelled:
                        logger.warning(f"Cancelled {cancelled} pending task(s) after a failure.")
                    raise
        return failures
