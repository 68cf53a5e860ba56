import subprocess
from pathlib import Path

import pytest

from rustdrill import verify as verify_mod
from rustdrill.exercise import Exercise, Mode, temp_file_path
from rustdrill.verify import ExerciseFailed, prompt_for_completion, verify

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"
PENDING_TEST = "// I AM NOT DONE\n\n#[test]\nfn it_works() {}\n"
COMPILE_ERROR = "error[E0425]: cannot find value"


class FakeToolchain:
    def __init__(self):
        self.compile_rc = 0
        self.run_rc = 0
        self.run_stdout = ""
        self.run_stderr = ""
        self.calls = []

    def __call__(self, args, **kwargs):
        args = [str(a) for a in args]
        self.calls.append(args)
        if args[0] in ("rustc", "cargo"):
            return subprocess.CompletedProcess(
                args, self.compile_rc, b"", COMPILE_ERROR.encode()
            )
        return subprocess.CompletedProcess(
            args, self.run_rc, self.run_stdout.encode(), self.run_stderr.encode()
        )

    def programs(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def toolchain(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_EMOJI", raising=False)
    fake = FakeToolchain()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


def make_exercise(tmp_path, name, source, mode=Mode.COMPILE, hint=""):
    path = tmp_path / f"{name}.rs"
    path.write_text(source)
    return Exercise(name=name, path=path, mode=mode, hint=hint)


def test_finished_exercises_pass(toolchain, tmp_path):
    exercises = [
        make_exercise(tmp_path, "first", FINISHED),
        make_exercise(tmp_path, "second", FINISHED),
    ]
    assert verify(exercises, (0, 2)) is None
    assert toolchain.programs().count("rustc") == 2
    assert toolchain.programs().count(temp_file_path()) == 2


def test_default_progress_accepts_generator(toolchain, tmp_path):
    exercises = [make_exercise(tmp_path, f"ex{i}", FINISHED) for i in range(3)]
    result = verify(e for e in exercises)
    assert result is None
    assert toolchain.programs().count("rustc") == 3
    assert toolchain.programs().count(temp_file_path()) == 3


def test_stops_at_pending_exercise(toolchain, tmp_path, capsys):
    pending = make_exercise(tmp_path, "pending_exercise", PENDING)
    finished = make_exercise(tmp_path, "finished_exercise", FINISHED)
    with pytest.raises(ExerciseFailed) as info:
        verify([pending, finished], (0, 2))
    assert info.value.exercise is pending
    assert toolchain.programs().count("rustc") == 1
    out = capsys.readouterr().out
    assert "I AM NOT DONE" in out
    assert "The code is compiling!" in out


def test_compile_failure_is_reported(toolchain, tmp_path, capsys):
    toolchain.compile_rc = 1
    exercise = make_exercise(tmp_path, "broken", FINISHED)
    with pytest.raises(ExerciseFailed) as info:
        verify([exercise], (0, 1))
    assert info.value.exercise is exercise
    out = capsys.readouterr().out
    assert f"Compiling of {exercise} failed!" in out
    assert COMPILE_ERROR in out
    assert temp_file_path() not in toolchain.programs()


def test_run_failure_is_reported(toolchain, tmp_path, capsys):
    toolchain.run_rc = 101
    toolchain.run_stdout = "partial output"
    toolchain.run_stderr = "thread 'main' panicked"
    exercise = make_exercise(tmp_path, "panics", FINISHED)
    with pytest.raises(ExerciseFailed):
        verify([exercise], (0, 1))
    out = capsys.readouterr().out
    assert f"Ran {exercise} with errors" in out
    assert "partial output" in out
    assert "thread 'main' panicked" in out


def test_test_mode_failure_shows_output(toolchain, tmp_path, capsys):
    toolchain.run_rc = 101
    toolchain.run_stdout = "test not_passing ... FAILED"
    exercise = make_exercise(tmp_path, "testNotPassed", FINISHED, Mode.TEST)
    with pytest.raises(ExerciseFailed):
        verify([exercise], (0, 1))
    out = capsys.readouterr().out
    assert f"Testing of {exercise} failed!" in out
    assert "test not_passing ... FAILED" in out
    assert ["rustc", "--test"] == toolchain.calls[0][:2]


def test_test_mode_runs_with_show_output(toolchain, tmp_path, capsys):
    toolchain.run_stdout = "THIS TEST TOO SHALL PASS"
    exercise = make_exercise(tmp_path, "testSuccess", FINISHED, Mode.TEST)
    verify([exercise], (0, 1), verbose=True)
    assert [temp_file_path(), "--show-output"] in toolchain.calls
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out


def test_clippy_mode_writes_manifest(toolchain, tmp_path):
    Path("exercises/clippy").mkdir(parents=True)
    exercise = make_exercise(tmp_path, "clippy1", FINISHED, Mode.CLIPPY)
    result = verify([exercise], (0, 1))
    assert result is None
    manifest = Path("exercises/clippy/Cargo.toml").read_text()
    assert 'name = "clippy1"' in manifest
    assert [call[:2] for call in toolchain.calls] == [
        ["rustc", str(exercise.path)],
        ["cargo", "clean"],
        ["cargo", "clippy"],
    ]
    assert temp_file_path() not in toolchain.programs()


def test_build_script_mode_uses_cargo_test(toolchain, tmp_path):
    Path("exercises/tests").mkdir(parents=True)
    exercise = make_exercise(tmp_path, "build", FINISHED, Mode.BUILD_SCRIPT)
    result = verify([exercise], (0, 1))
    assert result is None
    assert toolchain.calls == [
        ["cargo", "test", "--manifest-path", "./exercises/tests/Cargo.toml"]
    ]
    manifest = Path("exercises/tests/Cargo.toml").read_text()
    assert 'name = "build"' in manifest


def test_temp_binary_removed_after_verify(toolchain, tmp_path):
    Path(temp_file_path()).touch()
    exercise = make_exercise(tmp_path, "example", FINISHED)
    verify([exercise], (0, 1))
    assert not Path(temp_file_path()).exists()


def test_test_prints_output_when_verbose(toolchain, tmp_path, capsys):
    toolchain.run_stdout = "THIS TEST TOO SHALL PASS"
    exercise = make_exercise(tmp_path, "testSuccess", FINISHED, Mode.TEST)
    verify_mod.test(exercise, True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out


def test_test_hides_output_when_quiet(toolchain, tmp_path, capsys):
    toolchain.run_stdout = "THIS TEST TOO SHALL PASS"
    exercise = make_exercise(tmp_path, "testSuccess", FINISHED, Mode.TEST)
    verify_mod.test(exercise, False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_test_does_not_prompt_for_pending(toolchain, tmp_path, capsys):
    exercise = make_exercise(tmp_path, "pending_test_exercise", PENDING_TEST, Mode.TEST)
    verify_mod.test(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_test_raises_on_failure(toolchain, tmp_path):
    toolchain.run_rc = 101
    exercise = make_exercise(tmp_path, "testFailure", FINISHED, Mode.TEST)
    with pytest.raises(ExerciseFailed) as info:
        verify_mod.test(exercise, False)
    assert info.value.exercise is exercise


def test_prompt_for_done_exercise(toolchain, tmp_path, capsys):
    exercise = make_exercise(tmp_path, "finished_exercise", FINISHED)
    assert prompt_for_completion(exercise, None, False) is True
    assert capsys.readouterr().out == ""


def test_prompt_for_pending_exercise(toolchain, tmp_path, capsys):
    exercise = make_exercise(tmp_path, "pending_exercise", PENDING, Mode.TEST)
    assert prompt_for_completion(exercise, None, False) is False
    out = capsys.readouterr().out
    assert f"Successfully tested {exercise}!" in out
    assert "The code is compiling, and the tests pass!" in out
    assert " 3 |  // I AM NOT DONE" in out
    assert "fn main() {" in out
    assert "Hints:" not in out


def test_prompt_without_emoji(toolchain, tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    exercise = make_exercise(tmp_path, "clippy1", PENDING, Mode.CLIPPY)
    assert prompt_for_completion(exercise, None, False) is False
    out = capsys.readouterr().out
    assert "~*~ The code is compiling, and Clippy is happy! ~*~" in out
    assert "📎" not in out


def test_prompt_shows_output_and_hint(toolchain, tmp_path, capsys):
    exercise = make_exercise(tmp_path, "pending_exercise", PENDING, hint="Hello!")
    assert prompt_for_completion(exercise, "program said hi", True) is False
    out = capsys.readouterr().out
    assert out.index("Output:") < out.index("program said hi")
    assert out.index("Hints:") < out.index("Hello!")
    assert "=" * 20 in out