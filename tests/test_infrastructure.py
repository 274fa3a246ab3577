import tempfile
import unittest
from pathlib import Path

from portal.infrastructure.broadcast import BroadcastHub
from portal.infrastructure.local_storage import JsonFileStorage, MemoryStorage


class TestJsonFileStorage(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "profile" / "storage.json"

    def tearDown(self):
        self.tmp.cleanup()

    def test_values_survive_new_instance(self):
        JsonFileStorage(self.path).set("dealership-session", '{"user": {}}')
        reopened = JsonFileStorage(self.path)
        self.assertEqual(reopened.get("dealership-session"), '{"user": {}}')

        reopened.remove("dealership-session")
        self.assertIsNone(JsonFileStorage(self.path).get("dealership-session"))

    def test_corrupt_file_reads_as_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{broken", encoding="utf-8")
        storage = JsonFileStorage(self.path)
        self.assertIsNone(storage.get("anything"))
        storage.set("k", "v")
        self.assertEqual(storage.get("k"), "v")

    def test_memory_storage_shared_between_tabs(self):
        shared = {}
        MemoryStorage(shared).set("k", "v")
        self.assertEqual(MemoryStorage(shared).get("k"), "v")
        self.assertIsNone(MemoryStorage().get("k"))


class TestBroadcast(unittest.TestCase):
    def test_delivered_to_other_channels_only(self):
        hub = BroadcastHub()
        sender, receiver, elsewhere = hub.open("requests"), hub.open("requests"), hub.open("other")
        got = {"sender": [], "receiver": [], "elsewhere": []}
        sender.subscribe(got["sender"].append)
        receiver.subscribe(got["receiver"].append)
        elsewhere.subscribe(got["elsewhere"].append)

        self.assertEqual(sender.post_message({"n": 1}), 1)
        self.assertEqual(got, {"sender": [], "receiver": [{"n": 1}], "elsewhere": []})

    def test_unsubscribe_and_close(self):
        hub = BroadcastHub()
        sender, receiver = hub.open("requests"), hub.open("requests")
        got = []
        unsubscribe = receiver.subscribe(got.append)
        unsubscribe()
        sender.post_message({"n": 1})
        self.assertEqual(got, [])

        receiver.subscribe(got.append)
        receiver.close()
        self.assertEqual(sender.post_message({"n": 2}), 0)
        self.assertEqual(receiver.post_message({"n": 3}), 0)
        self.assertEqual(got, [])
