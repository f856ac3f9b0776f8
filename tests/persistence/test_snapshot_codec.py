import copy
import unittest

from persistence import SNAPSHOT_VERSION, SnapshotFormatError, decode_state, encode_state
from tasktimer import AppState, TaskTimerEngine


def _sample_state() -> AppState:
    engine = TaskTimerEngine()
    state = engine.add_task(AppState(), "Write report", 0.0)
    state = engine.add_task(state, "Review", 1.0)
    state = engine.toggle_timer(state, "0", 0.0)
    state = engine.toggle_timer(state, "0", 90.0)
    return engine.toggle_timer(state, "1000", 100.0)


class SnapshotCodecTests(unittest.TestCase):
    def test_encode_layout(self) -> None:
        raw = encode_state(_sample_state())

        self.assertEqual(SNAPSHOT_VERSION, raw["version"])
        self.assertEqual("1000", raw["active_task_id"])
        self.assertEqual(["1000", "0"], [task["id"] for task in raw["tasks"]])
        closed = raw["tasks"][1]
        self.assertEqual(90, closed["elapsed"])
        self.assertEqual(
            {"start": 0.0, "finish": 90.0, "active": False, "kind": "work"},
            closed["timers"][0],
        )

    def test_decode_restores_encoded_state(self) -> None:
        state = _sample_state()
        self.assertEqual(state, decode_state(encode_state(state)))

    def test_decode_recomputes_elapsed(self) -> None:
        raw = encode_state(_sample_state())
        raw["tasks"][1]["elapsed"] = 999_999

        state = decode_state(raw)
        self.assertEqual(90, state.tasks[1].elapsed)

    def test_unknown_version_is_rejected(self) -> None:
        raw = encode_state(_sample_state())
        for version in (None, 0, 2, "1"):
            broken = copy.deepcopy(raw)
            broken["version"] = version
            with self.assertRaises(SnapshotFormatError):
                decode_state(broken)

    def test_structural_errors_are_rejected(self) -> None:
        good = encode_state(_sample_state())
        mutations = {
            "root not object": lambda raw: [],
            "tasks not list": lambda raw: {**raw, "tasks": {}},
            "unknown kind": lambda raw: _set_timer(raw, "kind", "nap"),
            "string timestamp": lambda raw: _set_timer(raw, "start", "yesterday"),
            "nan start": lambda raw: _set_timer(raw, "start", float("nan")),
            "infinite finish": lambda raw: _set_timer(raw, "finish", float("inf")),
            "finish before start": lambda raw: _set_timer(raw, "finish", -5.0),
            "finished but active": lambda raw: _set_timer(raw, "active", True),
            "duplicate ids": lambda raw: {**raw, "tasks": raw["tasks"] + raw["tasks"][:1]},
            "dangling active id": lambda raw: {**raw, "active_task_id": "0"},
            "running without pointer": lambda raw: {**raw, "active_task_id": None},
        }
        for label, mutate in mutations.items():
            with self.subTest(label):
                with self.assertRaises(SnapshotFormatError):
                    decode_state(mutate(copy.deepcopy(good)))

    def test_empty_state_round_trip(self) -> None:
        raw = encode_state(AppState())
        self.assertEqual({"version": 1, "tasks": [], "active_task_id": None}, raw)
        self.assertEqual(AppState(), decode_state(raw))


def _set_timer(raw: dict, key: str, value) -> dict:
    raw["tasks"][1]["timers"][0][key] = value
    return raw


if __name__ == "__main__":
    unittest.main()
