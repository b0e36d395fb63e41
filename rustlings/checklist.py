"""Grading every exercise at once and recording the results as JSON."""

from __future__ import annotations

import json
import os
import threading
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from rustlings.exercise import Exercise
from rustlings.run import run
from rustlings.verify import ExerciseFailed

DEFAULT_RESULT_PATH = ".github/result/check_result.json"


@dataclass
class ExerciseResult:
    """Whether one exercise passed."""

    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    """Totals over a grading run."""

    total_exercations: int = 0
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """Results of a grading run, safe to update from several threads."""

    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None
    statistics: ExerciseStatistics = field(default_factory=ExerciseStatistics)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def record(self, name: str, result: bool) -> None:
        """Add the result of one exercise and update the totals."""
        with self._lock:
            self.exercises.append(ExerciseResult(name=name, result=result))
            if result:
                self.statistics.total_succeeds += 1
            else:
                self.statistics.total_failures += 1

    def to_json(self) -> str:
        """Return the check list as pretty-printed JSON."""
        with self._lock:
            data = {
                "exercises": [
                    {"name": item.name, "result": item.result}
                    for item in self.exercises
                ],
                "user_name": self.user_name,
                "statistics": {
                    "total_exercations": self.statistics.total_exercations,
                    "total_succeeds": self.statistics.total_succeeds,
                    "total_failures": self.statistics.total_failures,
                    "total_time": self.statistics.total_time,
                },
            }
        return json.dumps(data, indent=2, ensure_ascii=False)


def _now() -> int:
    return int(time.time())


def cicv_verify(
    exercises: Iterable[Exercise],
    output_path: str | os.PathLike = DEFAULT_RESULT_PATH,
) -> ExerciseCheckList:
    """Run every exercise concurrently, print progress and write the results file."""
    exercises = list(exercises)
    started = _now()
    total = len(exercises)
    check_list = ExerciseCheckList(
        statistics=ExerciseStatistics(total_exercations=total)
    )
    rights = 0
    rights_lock = threading.Lock()

    def grade(exercise: Exercise, task_start: int) -> None:
        nonlocal rights
        try:
            run(exercise, True)
        except ExerciseFailed:
            passed = False
        else:
            passed = True

        with rights_lock:
            if passed:
                rights += 1
            current = rights
        print(f"{exercise.name}执行成功" if passed else f"{exercise.name}执行失败")
        print(f"总的题目数: {total}")
        print(f"当前做正确的题目数: {current}")
        print(f"当前修改试卷耗时: {_now() - task_start} s")
        check_list.record(exercise.name, passed)

    with ThreadPoolExecutor(max_workers=os.cpu_count() or 1) as pool:
        futures = [pool.submit(grade, exercise, _now()) for exercise in exercises]
        for future in futures:
            future.result()

    total_time = _now() - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    check_list.statistics.total_time = total_time
    Path(output_path).write_text(check_list.to_json(), encoding="utf-8")
    return check_list