"""
logging_handler.py
------------------
Logging handler that routes formatted log records into a queue so a
consumer thread (e.g. a viewer polling for load progress) can display them.
"""

import logging
import queue

LOG_MESSAGE = "LOG"


class QueueHandler(logging.Handler):
    """
    A logging handler that places ("LOG", text) messages into a queue.
    """

    def __init__(self, queue_obj: queue.Queue):
        super().__init__()
        self.queue = queue_obj

    def emit(self, record: logging.LogRecord) -> None:
        log_entry = self.format(record)
        self.queue.put((LOG_MESSAGE, log_entry))
