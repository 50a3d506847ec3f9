"""
In-process fan-out of import progress messages.

Every message is stored as a ProgressMessage first; the hub then hands the
payload to each live subscriber queue (one per open stream).
"""
import logging
import queue
import threading

from .models import ProgressMessage

logger = logging.getLogger(__name__)

SUBSCRIBERS = set()
_LOCK = threading.Lock()
QUEUE_SIZE = 200


def subscribe():
    q = queue.Queue(maxsize=QUEUE_SIZE)
    with _LOCK:
        SUBSCRIBERS.add(q)
    return q


def unsubscribe(q):
    with _LOCK:
        SUBSCRIBERS.discard(q)


def subscriber_count():
    with _LOCK:
        return len(SUBSCRIBERS)


def broadcast(job, msg_type, message, data=None):
    record = ProgressMessage.objects.create(job=job, type=msg_type, message=message[:500], data=data or {})
    payload = record.as_payload()

    with _LOCK:
        targets = list(SUBSCRIBERS)
    for q in targets:
        try:
            q.put_nowait(payload)
        except queue.Full:
            # slow consumer; it can catch up through the polling endpoint
            logger.warning(f"Dropping push message {record.id} for a full subscriber queue")
    return payload
