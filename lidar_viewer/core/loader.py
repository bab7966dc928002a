"""
loader.py
---------
End-to-end ingestion: read the LAS source, decode it and build the
PointCloudData, reporting progress along the way. LoadWorker runs the same
pipeline on a background thread and publishes progress and the result
through a queue.
"""

import logging
import queue
import threading
import time
import uuid
from typing import Optional

from .. import config
from ..utils.logging_handler import QueueHandler
from .builder import PointCloudBuilder, ProgressSink, monotonic_sink
from .exceptions import IngestCancelled
from .file_operations import Source, inspect_decoded_points, read_las_source
from .models import Layer, PointCloudData

UPDATE_PROGRESS = "UPDATE_PROGRESS"
LOAD_COMPLETE = "LOAD_COMPLETE"
LOAD_FAILED = "LOAD_FAILED"


def load_point_cloud(
    source: Source,
    progress_sink: Optional[ProgressSink] = None,
    cancel_event: Optional[threading.Event] = None,
    builder: Optional[PointCloudBuilder] = None,
) -> PointCloudData:
    """
    Load a LAS/LAZ source into a PointCloudData.

    Ingestion is all-or-nothing: any failure propagates and no partial
    result is returned.

    Args:
        source: File path or raw container bytes.
        progress_sink: Receives monotonically increasing progress in [0, 1].
        cancel_event: Cancel token checked between processing stages and chunks.
        builder: Builder to use; defaults to the standard configuration.

    Raises:
        SourceIOError: If the source cannot be read.
        FormatError: If the container is unsupported or lacks positions.
        IngestCancelled: If cancel_event is set.
    """
    report = monotonic_sink(progress_sink)
    builder = builder or PointCloudBuilder()

    report(config.PROGRESS_START)
    raw = read_las_source(source)
    logging.info(inspect_decoded_points(raw))
    report(config.PROGRESS_DECODED)

    if cancel_event is not None and cancel_event.is_set():
        raise IngestCancelled("Point cloud ingestion was canceled")

    return builder.build(raw, raw.vertex_count, report, cancel_event)


def make_layer(data: PointCloudData, name: str, source: str) -> Layer:
    """Wrap a loaded cloud in a new visible Layer with a random id."""
    return Layer(id=str(uuid.uuid4()), name=name, source=source, point_cloud=data)


class LoadWorker(threading.Thread):
    """
    Background loader publishing to a queue:
    - ("UPDATE_PROGRESS", value) for each progress report
    - ("LOAD_COMPLETE", PointCloudData) on success
    - ("LOAD_FAILED", exception) on any error, including cancellation
    - ("LOG", text) log lines while running, if forward_logs is set

    Args:
        source: File path or raw container bytes.
        queue_obj: Queue receiving the messages.
        builder: Optional builder override.
        forward_logs: Attach a QueueHandler to the root logger while loading.
    """

    def __init__(
        self,
        source: Source,
        queue_obj: queue.Queue,
        builder: Optional[PointCloudBuilder] = None,
        forward_logs: bool = False,
    ) -> None:
        super().__init__(daemon=True)
        self.source = source
        self.queue = queue_obj
        self.builder = builder
        self.forward_logs = forward_logs
        self.cancel_event = threading.Event()

    def cancel(self) -> None:
        self.cancel_event.set()
        logging.info("Cancel requested.")

    def run(self) -> None:
        queue_handler = None
        if self.forward_logs:
            queue_handler = QueueHandler(self.queue)
            queue_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
            )
            logging.getLogger().addHandler(queue_handler)

        try:
            start_time = time.time()
            data = load_point_cloud(
                self.source,
                progress_sink=lambda value: self.queue.put((UPDATE_PROGRESS, value)),
                cancel_event=self.cancel_event,
                builder=self.builder,
            )
            logging.info(f"Total load time: {time.time() - start_time:.2f}s")
            self.queue.put((LOAD_COMPLETE, data))
        except IngestCancelled as exc:
            logging.info("Load canceled.")
            self.queue.put((LOAD_FAILED, exc))
        except Exception as exc:
            logging.error(f"Failed to load point cloud: {exc}")
            self.queue.put((LOAD_FAILED, exc))
        finally:
            if queue_handler is not None:
                logging.getLogger().removeHandler(queue_handler)
