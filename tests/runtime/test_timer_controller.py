import logging
import tempfile
import unittest
from pathlib import Path

from persistence import JsonFileStore, MemoryStore, PersistenceError, SnapshotFormatError
from runtime.controller import ControllerDependencies, Countdown, TimerController
from runtime.scheduler import TickScheduler
from tasktimer import AppState, TaskTimerEngine, TimerPolicy
from tasktimer.constants import KIND_SHORT_BREAK, KIND_WORK


class _FakeClock:
    def __init__(self, now: float = 0.0):
        self.value = now

    def now(self) -> float:
        return self.value


class _FailingStore:
    def __init__(self, initial=None):
        self._initial = initial
        self.attempts = 0

    def load(self):
        return self._initial

    def save(self, state):
        del state
        self.attempts += 1
        raise PersistenceError("disk full")


class _CorruptStore:
    def __init__(self):
        self.saved: list[AppState] = []

    def load(self):
        raise SnapshotFormatError("Unsupported snapshot version: 9")

    def save(self, state):
        self.saved.append(state)


class _RecordingNotifier:
    def __init__(self, error: Exception | None = None):
        self.calls: list[tuple[str, str]] = []
        self._error = error

    def notify(self, title: str, body: str) -> None:
        self.calls.append((title, body))
        if self._error is not None:
            raise self._error


def _policy() -> TimerPolicy:
    return TimerPolicy(
        work_seconds=60,
        short_break_seconds=10,
        long_break_seconds=30,
        long_break_every=2,
    )


class TimerControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock(1000.0)
        self.scheduler = TickScheduler(now_fn=self.clock.now)
        self.store = MemoryStore()
        self.notifier = _RecordingNotifier()

    def _controller(self, store=None, notifier=None) -> TimerController:
        return TimerController(
            ControllerDependencies(
                engine=TaskTimerEngine(_policy()),
                store=store if store is not None else self.store,
                clock=self.clock,
                scheduler=self.scheduler,
                notifier=notifier if notifier is not None else self.notifier,
                logger=logging.getLogger("test.controller"),
            )
        )

    def _advance(self, seconds: float) -> None:
        self.clock.value += seconds
        self.scheduler.run_due()

    def test_commands_persist_each_mutation(self) -> None:
        controller = self._controller()
        controller.add_task("Write tests")
        task_id = controller.state.tasks[0].id
        controller.toggle_task(task_id)
        controller.toggle_task(task_id)

        self.assertEqual(3, self.store.save_count)
        self.assertEqual(controller.state, self.store.load())

    def test_toggle_arms_and_pause_cancels_tick(self) -> None:
        controller = self._controller()
        controller.add_task("A")
        task_id = controller.state.tasks[0].id

        self.assertFalse(controller.is_ticking)
        controller.toggle_task(task_id)
        self.assertTrue(controller.is_ticking)
        self.assertEqual(1, self.scheduler.pending)
        self.assertEqual("01:00", controller.countdown_text())

        controller.toggle_task(task_id)
        self.assertFalse(controller.is_ticking)
        self.assertEqual(0, self.scheduler.pending)
        self.assertEqual(Countdown(), controller.countdown)

    def test_countdown_updates_every_tick(self) -> None:
        controller = self._controller()
        ticks: list[Countdown] = []
        controller.set_on_tick(ticks.append)
        controller.add_task("A")
        controller.toggle_task(controller.state.tasks[0].id)

        self._advance(1.0)
        self._advance(1.0)

        self.assertEqual("00:58", controller.countdown_text())
        self.assertEqual(["01:00", "00:59", "00:58"], [tick.text for tick in ticks[-3:]])

    def test_unrelated_commands_do_not_rearm_tick(self) -> None:
        controller = self._controller()
        controller.add_task("A")
        task_id = controller.state.tasks[0].id
        controller.toggle_task(task_id)
        armed = controller._tick

        controller.add_task("B")
        controller.remove_task(controller.state.tasks[0].id)

        self.assertIs(armed, controller._tick)
        self.assertEqual(1, self.scheduler.pending)

    def test_switching_task_rearms_single_tick(self) -> None:
        controller = self._controller()
        controller.add_task("A")
        self.clock.value += 1
        controller.add_task("B")
        a_id, b_id = controller.state.tasks[1].id, controller.state.tasks[0].id

        controller.toggle_task(a_id)
        first = controller._tick
        self.clock.value += 5
        controller.toggle_task(b_id)

        self.assertTrue(first.cancelled)
        self.assertIsNot(first, controller._tick)
        self.assertEqual(1, self.scheduler.pending)
        self.assertEqual(b_id, controller.countdown.task_id)

    def test_expiry_toggles_notifies_persists_and_cancels(self) -> None:
        controller = self._controller()
        completions = []
        controller.set_on_interval_complete(completions.append)
        controller.add_task("Deep work")
        task_id = controller.state.tasks[0].id
        controller.toggle_task(task_id)
        saves_before = self.store.save_count

        for _ in range(60):
            self._advance(1.0)

        self.assertIsNone(controller.state.active_task_id)
        task = controller.state.tasks[0]
        self.assertEqual(60, task.elapsed)
        self.assertFalse(task.timers[-1].active)
        self.assertFalse(controller.is_ticking)
        self.assertEqual(0, self.scheduler.pending)
        self.assertEqual(saves_before + 1, self.store.save_count)

        self.assertEqual(
            [("Work finished", "Deep work: next up is short break.")],
            self.notifier.calls,
        )
        self.assertEqual(1, len(completions))
        self.assertEqual(KIND_WORK, completions[0].kind)
        self.assertEqual(KIND_SHORT_BREAK, completions[0].next_kind)

        self._advance(5.0)
        self.assertEqual(1, len(self.notifier.calls))

    def test_persistence_failure_keeps_new_state(self) -> None:
        store = _FailingStore()
        failures: list[PersistenceError] = []
        controller = self._controller(store=store)
        controller.set_on_persistence_failure(failures.append)

        controller.add_task("A")
        controller.add_task("B")

        self.assertEqual(2, len(controller.state.tasks))
        self.assertEqual(2, store.attempts)
        self.assertEqual(2, len(failures))
        self.assertIsInstance(controller.last_persistence_error, PersistenceError)

    def test_corrupt_snapshot_falls_back_to_empty(self) -> None:
        store = _CorruptStore()
        controller = self._controller(store=store)

        self.assertEqual(AppState(), controller.state)
        controller.add_task("Fresh start")
        self.assertEqual(1, len(store.saved))

    def test_undecodable_snapshot_file_falls_back_to_empty(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "state.json"
            path.write_bytes(b'{"version": 1, "tasks": [\xff\xfe]}')

            controller = self._controller(store=JsonFileStore(path))

            self.assertEqual(AppState(), controller.state)

    def test_restored_running_task_resumes_countdown(self) -> None:
        engine = TaskTimerEngine(_policy())
        state = engine.add_task(AppState(), "A", 900.0)
        state = engine.toggle_timer(state, "900000", 980.0)

        controller = self._controller(store=MemoryStore(state))

        self.assertTrue(controller.is_ticking)
        self.assertEqual("00:40", controller.countdown_text())
        self.assertEqual("00:40 | A", controller.title())

    def test_restored_overdue_task_completes_on_first_tick(self) -> None:
        engine = TaskTimerEngine(_policy())
        state = engine.add_task(AppState(), "A", 0.0)
        state = engine.toggle_timer(state, "0", 0.0)

        controller = self._controller(store=MemoryStore(state))
        self._advance(1.0)

        self.assertIsNone(controller.state.active_task_id)
        # Expiry closes the interval at the tick time, not at its nominal end.
        self.assertEqual(1001, controller.state.tasks[0].elapsed)
        self.assertEqual(1, len(self.notifier.calls))

    def test_failing_notifier_does_not_break_expiry(self) -> None:
        controller = self._controller(notifier=_RecordingNotifier(RuntimeError("no audio")))
        controller.add_task("A")
        controller.toggle_task(controller.state.tasks[0].id)

        self.clock.value += 61
        controller.tick()

        self.assertIsNone(controller.state.active_task_id)

    def test_elapsed_display_counts_running_work_only(self) -> None:
        controller = self._controller()
        controller.add_task("A")
        task_id = controller.state.tasks[0].id
        self.assertEqual("Not started", controller.elapsed_display(controller.state.tasks[0]))

        controller.toggle_task(task_id)
        self.clock.value += 30
        self.assertEqual("30 seconds", controller.elapsed_display(controller.state.tasks[0]))

        controller.toggle_task(task_id)
        controller.toggle_task(task_id)  # short break
        self.clock.value += 9
        task = controller.state.tasks[0]
        self.assertEqual(30, controller.elapsed_seconds(task))

    def test_task_views_and_history(self) -> None:
        controller = self._controller()
        controller.add_task("A")
        task_id = controller.state.tasks[0].id
        controller.toggle_task(task_id)

        views = controller.task_views()
        self.assertEqual(1, len(views))
        self.assertTrue(views[0].active)
        self.assertEqual(((KIND_WORK, True),), views[0].history)

    def test_title_when_idle(self) -> None:
        controller = self._controller()
        self.assertEqual("taskspill", controller.title())

    def test_close_cancels_tick(self) -> None:
        controller = self._controller()
        controller.add_task("A")
        controller.toggle_task(controller.state.tasks[0].id)

        controller.close()

        self.assertFalse(controller.is_ticking)
        self.assertEqual(0, self.scheduler.pending)


if __name__ == "__main__":
    unittest.main()
