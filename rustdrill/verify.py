"""Verify exercises in order, stopping at the first one that is not finished."""

from __future__ import annotations

import sys
from collections.abc import Iterable

from rich.console import Console
from rich.status import Status
from rich.text import Text

from rustdrill.exercise import (
    CompilationError,
    CompiledExercise,
    Exercise,
    ExerciseRunError,
    Mode,
)
from rustdrill.ui import no_emoji, styled, success, warn

_BAR_WIDTH = 60


class ExerciseFailed(Exception):
    """An exercise failed to build, failed to run, or is still pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"exercise {exercise} is not finished")
        self.exercise = exercise


def _spinner(message: str) -> Status:
    return Console(stderr=True).status(message)


class _ProgressBar:
    """A progress line drawn on stderr when it is a terminal."""

    def __init__(self, position: int, total: int) -> None:
        self.position = position
        self.total = total
        self.percentage = position / total * 100.0 if total else 0.0
        self._drawn = False
        self._draw()

    def advance(self) -> None:
        self.position += 1
        if self.total:
            self.percentage += 100.0 / self.total
        self._draw()

    def finish(self) -> None:
        if self._drawn:
            sys.stderr.write("\n")
            sys.stderr.flush()

    def _draw(self) -> None:
        stream = sys.stderr
        if not stream.isatty():
            return
        if self.total:
            filled = min(self.position, self.total) * _BAR_WIDTH // self.total
        else:
            filled = _BAR_WIDTH
        bar = "#" * filled
        if filled < _BAR_WIDTH:
            bar += ">" + "-" * (_BAR_WIDTH - filled - 1)
        stream.write(
            f"\rProgress: [{bar}] {self.position}/{self.total} "
            f"({self.percentage:.1f} %)"
        )
        stream.flush()
        self._drawn = True


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int] | None = None,
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check each exercise in turn; raise ExerciseFailed at the first failure.

    ``progress`` is ``(already_done, total)``; by default it counts the
    given exercises.
    """
    if progress is None:
        exercises = list(exercises)
        progress = (0, len(exercises))
    num_done, total = progress
    bar = _ProgressBar(num_done, total)
    try:
        for exercise in exercises:
            if not _verify_one(exercise, verbose, success_hints):
                raise ExerciseFailed(exercise)
            bar.advance()
    finally:
        bar.finish()


def _verify_one(exercise: Exercise, verbose: bool, success_hints: bool) -> bool:
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            return _compile_and_test(exercise, True, verbose, success_hints)
        case Mode.COMPILE:
            return _compile_and_run_interactively(exercise, success_hints)
        case Mode.CLIPPY:
            return _compile_only(exercise, success_hints)
    raise ValueError(f"unknown mode: {exercise.mode}")


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run the exercise's test harness without prompting."""
    _compile_and_test(exercise, False, verbose, False)


def _compile(exercise: Exercise, status: Status) -> CompiledExercise:
    try:
        return exercise.compile()
    except CompilationError as exc:
        status.stop()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(exc.output.stderr)
        raise ExerciseFailed(exercise) from exc


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    with _spinner(f"Compiling {exercise}...") as status:
        _compile(exercise, status).close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _spinner(f"Compiling {exercise}...") as status:
        with _compile(exercise, status) as compiled:
            status.update(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseRunError as exc:
                status.stop()
                warn(f"Ran {exercise} with errors")
                print(exc.output.stdout)
                print(exc.output.stderr)
                raise ExerciseFailed(exercise) from exc
    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, interactive: bool, verbose: bool, success_hints: bool
) -> bool:
    with _spinner(f"Testing {exercise}...") as status:
        with _compile(exercise, status) as compiled:
            try:
                output = compiled.run()
            except ExerciseRunError as exc:
                status.stop()
                warn(
                    f"Testing of {exercise} failed! Please try again. "
                    "Here's the output:"
                )
                print(exc.output.stdout)
                raise ExerciseFailed(exercise) from exc
    if verbose:
        print(output.stdout)
    if interactive:
        return prompt_for_completion(exercise, None, success_hints)
    return True


def _separator() -> Text:
    return styled("=" * 20, None, True)


def prompt_for_completion(
    exercise: Exercise,
    prompt_output: str | None = None,
    success_hints: bool = False,
) -> bool:
    """Return True if the exercise is done; otherwise show where its marker is."""
    state = exercise.state()
    if state.done():
        return True

    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")

    emoji_free = no_emoji()
    clippy_message = (
        "The code is compiling, and Clippy is happy!"
        if emoji_free
        else "The code is compiling, and 📎 Clippy 📎 is happy!"
    )
    success_message = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_message,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    console = Console(highlight=False, soft_wrap=True)
    console.print()
    if emoji_free:
        console.print(f"~*~ {success_message} ~*~", markup=False)
    else:
        console.print(f"🎉 🎉  {success_message} 🎉 🎉", markup=False)
    console.print()

    if prompt_output is not None:
        console.print("Output:")
        console.print(_separator())
        console.print(prompt_output, markup=False)
        console.print(_separator())
        console.print()
    if success_hints:
        console.print("Hints:")
        console.print(_separator())
        console.print(exercise.hint, markup=False)
        console.print(_separator())
        console.print()

    console.print("You can keep working on this exercise,")
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            styled("`I AM NOT DONE`", None, True),
            " comment:",
        )
    )
    console.print()
    for context_line in state.context:
        content = (
            styled(context_line.line, None, True)
            if context_line.important
            else Text(context_line.line)
        )
        console.print(
            Text.assemble(
                styled(f"{context_line.number:>2}", "blue", True),
                " ",
                styled("|", "blue"),
                "  ",
                content,
            )
        )
    return False