"""In-memory thread cache and thread name index."""
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..shared.utils import find_prefix_match
from .errors import InvalidPayloadError
from .schemas import ThreadRecord


def normalize_thread(thread: Union[ThreadRecord, Mapping[str, Any]]) -> ThreadRecord:
    """Reduce a thread payload to a fresh ThreadRecord."""
    if isinstance(thread, ThreadRecord):
        thread = thread.model_dump()
    try:
        return ThreadRecord.model_validate(thread)
    except ValidationError as exc:
        raise InvalidPayloadError(f"Malformed thread payload: {exc.error_count()} error(s)") from exc


class ThreadCache:
    """Threads keyed by id, plus a name -> id index for named threads.

    ``put`` is the only way in; records and index are updated together.
    Entries never expire and index entries are never pruned.
    """

    def __init__(self) -> None:
        self.threads: Dict[str, ThreadRecord] = {}
        self.name_index: Dict[str, str] = {}

    def put(self, thread: Union[ThreadRecord, Mapping[str, Any]]) -> ThreadRecord:
        record = normalize_thread(thread)
        self.threads[record.thread_id] = record
        if record.name:
            self.name_index[record.name] = record.thread_id
        return record

    def put_many(self, threads: List[Union[ThreadRecord, Mapping[str, Any]]]) -> List[ThreadRecord]:
        """Cache all threads, or none of them if any payload is malformed."""
        records = [normalize_thread(t) for t in threads]
        return [self.put(record) for record in records]

    def get(self, thread_id: str) -> Optional[ThreadRecord]:
        return self.threads.get(thread_id)

    def find_id_by_name(self, name: str) -> Optional[str]:
        full_name = find_prefix_match(self.name_index, name)
        if full_name is None:
            return None
        return self.name_index[full_name]

    def recent(self, limit: int) -> List[ThreadRecord]:
        ordered = sorted(self.threads.values(), key=lambda t: t.last_message_timestamp or 0, reverse=True)
        return ordered[:limit]

    def __len__(self) -> int:
        return len(self.threads)

    def __contains__(self, thread_id: object) -> bool:
        return thread_id in self.threads
