import threading
import weakref


class RoomLocks:
    """
    One lock per room id, so admissions and deletes for a room run one at a time.

    Entries are weak: a room's lock lives only while some caller holds or waits
    on it, so ids of rooms nobody is booking do not pile up.
    """

    def __init__(self):
        self._locks = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def for_room(self, room_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[room_id] = lock
            return lock

    def __len__(self):
        with self._guard:
            return len(self._locks)


admission_locks = RoomLocks()
