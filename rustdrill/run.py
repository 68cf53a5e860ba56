"""Run a single exercise, or reset it with git."""

from __future__ import annotations

import subprocess

from rich.console import Console

from rustdrill.exercise import CompilationError, Exercise, ExerciseRunError, Mode
from rustdrill.ui import success, warn
from rustdrill.verify import ExerciseFailed, test


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Build and run one exercise; raise ExerciseFailed if that fails."""
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            test(exercise, verbose)
        case Mode.COMPILE | Mode.CLIPPY:
            _compile_and_run(exercise)
        case _:
            raise ValueError(f"unknown mode: {exercise.mode}")


def reset(exercise: Exercise) -> subprocess.Popen:
    """Start ``git stash -- <path>`` for the exercise and return the process."""
    try:
        return subprocess.Popen(["git", "stash", "--", str(exercise.path)])
    except OSError as exc:
        raise ExerciseFailed(exercise) from exc


def _compile_and_run(exercise: Exercise) -> None:
    with Console(stderr=True).status(f"Compiling {exercise}...") as status:
        try:
            compiled = exercise.compile()
        except CompilationError as exc:
            status.stop()
            warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
            print(exc.output.stderr)
            raise ExerciseFailed(exercise) from exc
        with compiled:
            status.update(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseRunError as exc:
                status.stop()
                print(exc.output.stdout)
                print(exc.output.stderr)
                warn(f"Ran {exercise} with errors")
                raise ExerciseFailed(exercise) from exc
    print(output.stdout)
    success(f"Successfully ran {exercise}")