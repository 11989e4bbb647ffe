# =========================================================
# --- services_batch.py ---
# =========================================================

"""
Batch runner for robot vs robot simulations.

Starts simulations up to a concurrency limit and polls the running ones
until they finish. This is a counter, not a scheduler: scenarios start in
order and nothing is cancelled except by the caller.
"""
import json
import logging
import time
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Deque, Dict, List, Optional

from .api import ApiError, ApiService

logger = logging.getLogger(__name__)

# =========================================================

DIFFICULTIES = ("beginner", "intermediate", "advanced")
FINISHED_STATES = ("completed", "error")


@dataclass
class BatchScenario:
    """
    One simulation to run.

    Attributes:
        robot1_difficulty (str): Difficulty of robot 1.
        robot2_difficulty (str): Difficulty of robot 2.
        speed (Optional[int]): Milliseconds between moves; runner default if None.
        name (Optional[str]): Label for the results.
    """
    robot1_difficulty: str
    robot2_difficulty: str
    speed: Optional[int] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "BatchScenario":
        """Build a scenario from a camelCase JSON object."""
        speed = data.get("speed")
        return cls(
            robot1_difficulty=str(data.get("robot1Difficulty", "beginner")),
            robot2_difficulty=str(data.get("robot2Difficulty", "beginner")),
            speed=int(speed) if speed is not None else None,
            name=data.get("name"),
        )

    @property
    def label(self) -> str:
        return self.name or f"{self.robot1_difficulty} vs {self.robot2_difficulty}"


@dataclass
class BatchResult:
    """
    Outcome of one scenario.

    Attributes:
        scenario (BatchScenario): The scenario.
        simulation_id (Optional[str]): Id assigned by the service.
        result (Optional[dict]): Final simulation status document.
        error (Optional[str]): Error message if the scenario failed.
        duration (Optional[float]): Duration in milliseconds reported by the service.
    """
    scenario: BatchScenario
    simulation_id: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    duration: Optional[float] = None

    @property
    def completed(self) -> bool:
        return self.result is not None and self.error is None


def preset_scenarios(preset: str, default_speed: int) -> List[BatchScenario]:
    """
    Return a named set of scenarios.

    Args:
        preset (str): "all", "difficulty-test" or "speed-test".
        default_speed (int): Speed for presets that do not fix one.

    Raises:
        ValueError: For unknown preset names.
    """
    if preset == "all":
        pairs = [(a, b) for i, a in enumerate(DIFFICULTIES) for b in DIFFICULTIES[i:]]
        return [
            BatchScenario(a, b, default_speed, f"{a.capitalize()} vs {b.capitalize()}")
            for a, b in pairs
        ]
    if preset == "difficulty-test":
        return [
            BatchScenario("beginner", "advanced", default_speed, "Beginner vs Advanced (3 rounds)")
            for _ in range(3)
        ]
    if preset == "speed-test":
        return [
            BatchScenario("intermediate", "intermediate", speed, f"{label} Speed Test")
            for label, speed in (("Fast", 100), ("Normal", 1000), ("Slow", 3000))
        ]
    raise ValueError(f"Unknown preset: {preset}. Available: all, difficulty-test, speed-test")


def load_scenarios(path: Path) -> List[BatchScenario]:
    """
    Load scenarios from a JSON file holding a list of scenario objects.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not a JSON list of objects.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise ValueError(f"{path} must contain a JSON list of scenario objects")
    return [BatchScenario.from_json(d) for d in data]


def save_results(results: List[BatchResult], path: Path) -> None:
    """Write results as JSON."""
    Path(path).write_text(json.dumps([asdict(r) for r in results], indent=2), encoding="utf-8")


def summarize(results: List[BatchResult]) -> Dict[str, Any]:
    """
    Return totals of a batch.

    Returns:
        dict: total, completed, failed, and average_duration (ms, None without data).
    """
    completed = [r for r in results if r.completed]
    failed = [r for r in results if r.error]
    average = None
    if completed:
        average = sum(r.duration or 0 for r in completed) / len(completed)
    return {
        "total": len(results),
        "completed": len(completed),
        "failed": len(failed),
        "average_duration": average,
    }


class BatchSimulationRunner:
    """
    Runs scenarios against the service with a max-concurrency bound.

    Attributes:
        api (ApiService): Service client.
        max_concurrent (int): Simulations allowed to run at once.
        default_speed (int): Speed for scenarios without one.
        poll_interval (float): Seconds between polling rounds.
    """

    def __init__(
        self,
        api: ApiService,
        max_concurrent: int = 3,
        default_speed: int = 200,
        poll_interval: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        on_event: Optional[Callable[[str, BatchResult], None]] = None,
    ) -> None:
        """
        Args:
            api (ApiService): Service client.
            max_concurrent (int): Simulations allowed to run at once (at least 1).
            default_speed (int): Speed for scenarios without one.
            poll_interval (float): Seconds between polling rounds.
            sleep (Callable[[float], None]): Sleep function, replaceable in tests.
            on_event (Optional[Callable]): Called with ("started"|"finished"|"failed", result).
        """
        self.api: ApiService = api
        self.max_concurrent: int = max(1, max_concurrent)
        self.default_speed: int = default_speed
        self.poll_interval: float = poll_interval
        self._sleep = sleep
        self._on_event = on_event
        self.running: Dict[str, BatchResult] = {}
        self.queue: Deque[BatchScenario] = deque()
        self.results: List[BatchResult] = []

    def _emit(self, event: str, result: BatchResult) -> None:
        if self._on_event:
            self._on_event(event, result)

    def run_batch(self, scenarios: List[BatchScenario]) -> List[BatchResult]:
        """
        Run all scenarios and return their results in completion order.

        Args:
            scenarios (List[BatchScenario]): Scenarios to run.

        Returns:
            List[BatchResult]: One result per scenario.
        """
        self.queue = deque(scenarios)
        self.results = []
        self.running = {}

        while self.queue or self.running:
            while len(self.running) < self.max_concurrent and self.queue:
                self.start_scenario(self.queue.popleft())

            self.check_running()

            if self.queue or self.running:
                self._sleep(self.poll_interval)

        return self.results

    def start_scenario(self, scenario: BatchScenario) -> None:
        """Start one simulation; failures are recorded as errored results."""
        try:
            simulation = self.api.start_simulation(
                speed=scenario.speed or self.default_speed,
                robot1_difficulty=scenario.robot1_difficulty,
                robot2_difficulty=scenario.robot2_difficulty,
            )
        except ApiError as e:
            result = BatchResult(scenario, error=e.message)
            self.results.append(result)
            self._emit("failed", result)
            return

        simulation_id = (simulation or {}).get("id")
        if not simulation_id:
            result = BatchResult(scenario, error="Simulation response without id")
            self.results.append(result)
            self._emit("failed", result)
            return

        result = BatchResult(scenario, simulation_id=simulation_id)
        self.running[simulation_id] = result
        logger.info(f"Started {scenario.label} ({simulation_id})")
        self._emit("started", result)

    def check_running(self) -> None:
        """Poll every running simulation once and collect the finished ones."""
        for simulation_id in list(self.running):
            result = self.running[simulation_id]
            try:
                status = self.api.get_simulation_status(simulation_id) or {}
            except ApiError as e:
                result.error = e.message or "Status check failed"
                self._finish(simulation_id, "failed")
                continue

            if status.get("status") in FINISHED_STATES:
                result.result = status
                result.duration = status.get("duration")
                if status.get("status") == "error":
                    result.error = status.get("error") or "Simulation failed"
                self._finish(simulation_id, "finished")

    def _finish(self, simulation_id: str, event: str) -> None:
        result = self.running.pop(simulation_id)
        self.results.append(result)
        logger.info(f"Finished {result.scenario.label} ({simulation_id}): {event}")
        self._emit(event, result)
