import json
import subprocess
from unittest.mock import patch

import pytest

from rustdrill.checklist import (
    ExerciseCheckList,
    ExerciseResult,
    ExerciseStatistics,
    cicv_verify,
)
from rustdrill.exercise import Exercise, Mode


def _fake_run(args, **kwargs):
    if args[0] == "rustc":
        source = next(arg for arg in args if str(arg).endswith(".rs"))
        code = 1 if "broken" in str(source) else 0
        return subprocess.CompletedProcess(args, code, b"", b"error" if code else b"")
    return subprocess.CompletedProcess(args, 0, b"ran\n", b"")


@pytest.fixture
def exercises(tmp_path):
    return [
        Exercise("good1", tmp_path / "good1.rs", Mode.COMPILE, "hint one"),
        Exercise("good2", tmp_path / "good2.rs", Mode.TEST, "hint two"),
    ]


def test_cicvverify_all_pass(tmp_path, exercises, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "check_result.json"
    with patch("subprocess.run", side_effect=_fake_run):
        result = cicv_verify(exercises, out)
    assert result.statistics.total_exercations == 2
    assert result.statistics.total_succeeds == 2
    assert result.statistics.total_failures == 0
    assert sorted(r.name for r in result.exercises) == ["good1", "good2"]
    assert all(r.result for r in result.exercises)
    written = json.loads(out.read_text(encoding="utf-8"))
    assert written == result.to_dict()


def test_cicvverify_records_failures(tmp_path, exercises, monkeypatch):
    monkeypatch.chdir(tmp_path)
    exercises.append(Exercise("broken", tmp_path / "broken.rs", Mode.COMPILE, ""))
    out = tmp_path / "report.json"
    with patch("subprocess.run", side_effect=_fake_run):
        result = cicv_verify(exercises, out)
    outcome = {r.name: r.result for r in result.exercises}
    assert outcome == {"good1": True, "good2": True, "broken": False}
    stats = result.statistics
    assert stats.total_succeeds + stats.total_failures == stats.total_exercations
    assert stats.total_failures == 1


def test_cicvverify_empty(tmp_path):
    out = tmp_path / "empty.json"
    result = cicv_verify([], out)
    assert result.exercises == []
    assert json.loads(out.read_text())["statistics"]["total_exercations"] == 0


def test_to_json_round_trip_and_keys():
    check_list = ExerciseCheckList(
        exercises=[ExerciseResult("intro1", True)],
        statistics=ExerciseStatistics(1, 1, 0, 3),
    )
    data = json.loads(check_list.to_json())
    assert data == check_list.to_dict()
    assert list(data) == ["exercises", "user_name", "statistics"]
    assert list(data["statistics"]) == [
        "total_exercations",
        "total_succeeds",
        "total_failures",
        "total_time",
    ]
    assert '"user_name": null' in check_list.to_json()