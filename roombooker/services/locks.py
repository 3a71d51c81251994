import threading
from collections import defaultdict
from contextlib import ExitStack, contextmanager


class RoomLocks:
    """Per-room exclusive locks for the check-then-write sections on bookings."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = defaultdict(threading.Lock)

    def _lock_for(self, room_id: int) -> threading.Lock:
        with self._guard:
            return self._locks[room_id]

    @contextmanager
    def hold(self, *room_ids: int):
        # Always acquired in ascending id order so two holders cannot deadlock.
        with ExitStack() as stack:
            for room_id in sorted(set(room_ids)):
                stack.enter_context(self._lock_for(room_id))
            yield


room_locks = RoomLocks()
