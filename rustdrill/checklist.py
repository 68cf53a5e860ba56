"""Check every exercise once and record the results as a JSON report."""

from __future__ import annotations

import json
import os
import threading
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path

from rustdrill.exercise import Exercise
from rustdrill.run import run
from rustdrill.verify import ExerciseFailed

DEFAULT_RESULT_PATH = ".github/result/check_result.json"
_MAX_WORKERS = 32


@dataclass
class ExerciseResult:
    """Whether one exercise passed."""

    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    """Totals over a whole check run."""

    total_exercations: int = 0
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """The report written after checking every exercise."""

    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None
    statistics: ExerciseStatistics = field(default_factory=ExerciseStatistics)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        """Return the report as indented JSON."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def _now() -> int:
    return int(time.time())


def cicv_verify(
    exercises: Iterable[Exercise],
    output_path: str | os.PathLike = DEFAULT_RESULT_PATH,
) -> ExerciseCheckList:
    """Run every exercise concurrently, write the report and return it."""
    started = _now()
    exercises = list(exercises)
    total = len(exercises)
    check_list = ExerciseCheckList(statistics=ExerciseStatistics(total_exercations=total))
    lock = threading.Lock()

    def check(exercise: Exercise) -> None:
        exercise_started = _now()
        try:
            run(exercise, True)
        except ExerciseFailed:
            passed = False
        else:
            passed = True
        with lock:
            stats = check_list.statistics
            if passed:
                stats.total_succeeds += 1
                print(f"{exercise.name}执行成功")
            else:
                print(f"{exercise.name}执行失败")
            print(f"总的题目数: {total}")
            print(f"当前做正确的题目数: {stats.total_succeeds}")
            print(f"当前修改试卷耗时: {_now() - exercise_started} s")
            check_list.exercises.append(ExerciseResult(exercise.name, passed))
            if not passed:
                stats.total_failures += 1

    with ThreadPoolExecutor(max_workers=max(1, min(_MAX_WORKERS, total))) as pool:
        for future in [pool.submit(check, exercise) for exercise in exercises]:
            future.result()

    total_time = _now() - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    check_list.statistics.total_time = total_time
    Path(output_path).write_text(check_list.to_json(), encoding="utf-8")
    return check_list