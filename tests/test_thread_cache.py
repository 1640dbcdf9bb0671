from __future__ import annotations

import unittest

from term_chat.client.cache import ThreadCache
from term_chat.client.errors import InvalidPayloadError
from term_chat.client.schemas import ThreadRecord

RECORD_FIELDS = {"thread_id", "name", "color", "last_message_timestamp", "unread_count"}


class TestThreadCache(unittest.TestCase):
    def test_put_keeps_only_the_five_record_fields(self) -> None:
        cache = ThreadCache()
        record = cache.put(
            {
                "threadID": "301",
                "name": "Book Club",
                "color": "#ff0000",
                "lastMessageTimestamp": 1700000000000,
                "unreadCount": 2,
                "participantIDs": ["1", "2"],
                "snippet": "hello",
                "emoji": {"emoji": "x"},
            }
        )

        self.assertEqual(RECORD_FIELDS, set(record.model_dump()))
        self.assertEqual("Book Club", record.name)
        self.assertEqual(1700000000000, record.last_message_timestamp)
        self.assertFalse(hasattr(record, "snippet"))

    def test_recaching_overwrites_without_merging(self) -> None:
        cache = ThreadCache()
        cache.put({"threadID": "301", "name": "Old Name", "color": "#00ff00", "unreadCount": 4})
        record = cache.put({"threadID": "301", "name": "New Name"})

        self.assertEqual("New Name", record.name)
        self.assertIsNone(record.color)
        self.assertIsNone(record.unread_count)
        self.assertEqual(1, len(cache))
        self.assertIs(record, cache.get("301"))

    def test_only_named_threads_are_indexed(self) -> None:
        cache = ThreadCache()
        cache.put({"threadID": "1", "name": "Family"})
        cache.put({"threadID": "2", "name": ""})
        cache.put({"threadID": "3"})

        self.assertEqual({"Family": "1"}, cache.name_index)
        self.assertEqual(3, len(cache))

    def test_index_is_never_pruned_on_rename(self) -> None:
        cache = ThreadCache()
        cache.put({"threadID": "1", "name": "Family"})
        cache.put({"threadID": "1", "name": "Family Chat"})

        self.assertEqual("1", cache.name_index["Family"])
        self.assertEqual("1", cache.name_index["Family Chat"])

    def test_find_id_by_name_is_case_insensitive_prefix(self) -> None:
        cache = ThreadCache()
        cache.put({"threadID": "1", "name": "Weekend Plans"})

        for prefix in ("W", "week", "WEEKEND P", "Weekend Plans"):
            self.assertEqual("1", cache.find_id_by_name(prefix), prefix)
        self.assertIsNone(cache.find_id_by_name("plans"))

    def test_find_id_by_name_prefers_first_inserted(self) -> None:
        cache = ThreadCache()
        cache.put({"threadID": "1", "name": "Sam Smith"})
        cache.put({"threadID": "2", "name": "Sam Jones"})

        self.assertEqual("1", cache.find_id_by_name("sam"))

    def test_put_copies_record_instances(self) -> None:
        cache = ThreadCache()
        original = ThreadRecord(thread_id="9", name="Solo")
        stored = cache.put(original)

        self.assertIsNot(original, stored)
        self.assertEqual(original, stored)

    def test_put_many_is_all_or_nothing(self) -> None:
        cache = ThreadCache()
        cache.put({"threadID": "1", "name": "Family"})

        with self.assertRaises(InvalidPayloadError):
            cache.put_many([{"threadID": "2", "name": "Work"}, {"name": "no id"}])

        self.assertEqual(["1"], list(cache.threads))
        self.assertEqual({"Family": "1"}, cache.name_index)

    def test_recent_orders_by_last_message(self) -> None:
        cache = ThreadCache()
        cache.put({"threadID": "1", "name": "Old", "lastMessageTimestamp": 10})
        cache.put({"threadID": "2", "name": "New", "lastMessageTimestamp": 30})
        cache.put({"threadID": "3", "name": "Middle", "lastMessageTimestamp": 20})

        self.assertEqual(["New", "Middle"], [t.name for t in cache.recent(2)])


if __name__ == "__main__":
    unittest.main()
