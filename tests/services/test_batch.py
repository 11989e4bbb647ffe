import json

import pytest

from nodots_backgammon.services.api import ApiError
from nodots_backgammon.services.batch import (
    BatchResult, BatchScenario, BatchSimulationRunner,
    load_scenarios, preset_scenarios, save_results, summarize,
)


class FakeSimulationApi:
    """Simulations finish after a fixed number of status polls."""

    def __init__(self, polls_until_done=2, fail_start=(), final_status="completed"):
        self.polls_until_done = polls_until_done
        self.fail_start = set(fail_start)
        self.final_status = final_status
        self.started = []
        self.polls = {}
        self.max_running = 0
        self.running = set()

    def start_simulation(self, speed=None, robot1_difficulty=None, robot2_difficulty=None):
        index = len(self.started)
        self.started.append((speed, robot1_difficulty, robot2_difficulty))
        if index in self.fail_start:
            raise ApiError("robots busy", 503)
        simulation_id = f"sim-{index}"
        self.running.add(simulation_id)
        self.max_running = max(self.max_running, len(self.running))
        return {"id": simulation_id}

    def get_simulation_status(self, simulation_id):
        self.polls[simulation_id] = self.polls.get(simulation_id, 0) + 1
        if self.polls[simulation_id] < self.polls_until_done:
            return {"id": simulation_id, "status": "running"}
        self.running.discard(simulation_id)
        status = {"id": simulation_id, "status": self.final_status, "duration": 4000}
        if self.final_status == "error":
            status["error"] = "robot crashed"
        return status


def scenarios(n, speed=None):
    return [BatchScenario("beginner", "advanced", speed, f"s{i}") for i in range(n)]


def test_runs_every_scenario_within_limit():
    api = FakeSimulationApi(polls_until_done=3)
    sleeps = []
    runner = BatchSimulationRunner(api, max_concurrent=2, default_speed=150, sleep=sleeps.append)

    results = runner.run_batch(scenarios(5))

    assert len(results) == 5
    assert all(r.completed for r in results)
    assert api.max_running == 2
    assert all(call[0] == 150 for call in api.started)
    assert sleeps and all(s == 2.0 for s in sleeps)


def test_scenario_speed_overrides_default():
    api = FakeSimulationApi(polls_until_done=1)
    BatchSimulationRunner(api, sleep=lambda _: None).run_batch(scenarios(1, speed=900))
    assert api.started == [(900, "beginner", "advanced")]


def test_failed_start_is_recorded():
    api = FakeSimulationApi(polls_until_done=1, fail_start={0})
    events = []
    runner = BatchSimulationRunner(api, sleep=lambda _: None, on_event=lambda e, r: events.append((e, r.scenario.name)))

    results = runner.run_batch(scenarios(2))

    assert [r.error for r in results] == ["robots busy", None]
    assert events[0] == ("failed", "s0")
    assert ("finished", "s1") in events


def test_error_status_counts_as_failure():
    api = FakeSimulationApi(polls_until_done=1, final_status="error")
    results = BatchSimulationRunner(api, sleep=lambda _: None).run_batch(scenarios(1))
    assert results[0].error == "robot crashed"
    assert not results[0].completed


def test_poll_error_finishes_scenario():
    class BrokenStatusApi(FakeSimulationApi):
        def get_simulation_status(self, simulation_id):
            raise ApiError("gone", 404)

    results = BatchSimulationRunner(BrokenStatusApi(), sleep=lambda _: None).run_batch(scenarios(1))
    assert results[0].error == "gone"


def test_no_sleep_after_last_poll():
    api = FakeSimulationApi(polls_until_done=1)
    sleeps = []
    BatchSimulationRunner(api, sleep=sleeps.append).run_batch(scenarios(2))
    assert sleeps == []


def test_presets():
    assert len(preset_scenarios("all", 200)) == 6
    assert [s.speed for s in preset_scenarios("speed-test", 200)] == [100, 1000, 3000]
    assert len(preset_scenarios("difficulty-test", 300)) == 3
    with pytest.raises(ValueError, match="Unknown preset"):
        preset_scenarios("everything", 200)


def test_load_scenarios(tmp_path):
    path = tmp_path / "scenarios.json"
    path.write_text(json.dumps([{"robot1Difficulty": "advanced", "speed": 500}, {"name": "x"}]))
    loaded = load_scenarios(path)
    assert loaded[0] == BatchScenario("advanced", "beginner", 500, None)
    assert loaded[1].label == "x"


def test_load_scenarios_rejects_non_lists(tmp_path):
    path = tmp_path / "scenarios.json"
    path.write_text(json.dumps({"robot1Difficulty": "advanced"}))
    with pytest.raises(ValueError):
        load_scenarios(path)


def test_summarize_and_save(tmp_path):
    results = [
        BatchResult(BatchScenario("beginner", "beginner"), "a", {"status": "completed"}, None, 2000),
        BatchResult(BatchScenario("beginner", "advanced"), "b", {"status": "completed"}, None, 4000),
        BatchResult(BatchScenario("advanced", "advanced"), error="boom"),
    ]
    assert summarize(results) == {"total": 3, "completed": 2, "failed": 1, "average_duration": 3000}

    path = tmp_path / "out.json"
    save_results(results, path)
    saved = json.loads(path.read_text())
    assert saved[2]["error"] == "boom"
    assert saved[0]["scenario"]["robot2_difficulty"] == "beginner"


def test_summarize_empty():
    assert summarize([])["average_duration"] is None
