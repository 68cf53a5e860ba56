"""Exercises: loading, compiling, running and checking their state."""

from __future__ import annotations

import enum
import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from rustdrill.ui import no_emoji

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file_path() -> str:
    """Return a temporary binary path unique to this process and thread."""
    return f"./temp_{os.getpid()}_ThreadId{threading.get_ident()}"


def clean() -> None:
    """Remove the temporary binary, ignoring a missing file."""
    try:
        os.remove(temp_file_path())
    except OSError:
        pass


class Mode(enum.Enum):
    """How an exercise is built and checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """One source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class State:
    """Completion state: done when there is no pending context."""

    context: tuple[ContextLine, ...] = ()

    def done(self) -> bool:
        return not self.context


@dataclass
class ExerciseOutput:
    """Captured output of a finished process."""

    stdout: str
    stderr: str


class _OutputError(Exception):
    description = "exercise failed"

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(self.description)
        self.output = output


class CompilationError(_OutputError):
    """The exercise failed to compile."""

    description = "compilation failed"


class ExerciseRunError(_OutputError):
    """The compiled exercise exited unsuccessfully."""

    description = "run failed"


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def _output_of(result: subprocess.CompletedProcess) -> ExerciseOutput:
    return ExerciseOutput(_decode(result.stdout), _decode(result.stderr))


def _cargo_manifest(name: str) -> str:
    return (
        "[package]\n"
        f'name = "{name}"\n'
        'version = "0.0.1"\n'
        'edition = "2021"\n'
        "[[bin]]\n"
        f'name = "{name}"\n'
        f'path = "{name}.rs"'
    )


def _write_manifest(path: str, name: str) -> None:
    message = (
        "Failed to write Clippy Cargo.toml file."
        if no_emoji()
        else "Failed to write 📎 Clippy 📎 Cargo.toml file."
    )
    try:
        Path(path).write_text(_cargo_manifest(name))
    except OSError as exc:
        raise OSError(message) from exc


def _source_lines(source: str) -> list[str]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


class CompiledExercise:
    """A successfully compiled exercise; closing it removes the binary."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise
        self._closed = False

    def run(self) -> ExerciseOutput:
        if self._closed:
            raise ValueError("compiled exercise is closed")
        return self.exercise._run()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *args) -> None:
        self.close()


@dataclass
class Exercise:
    """An exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str = field(default="")

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def _rustc(self, *extra: str) -> list[str]:
        return [
            "rustc",
            *extra,
            str(self.path),
            "-o",
            temp_file_path(),
            *RUSTC_COLOR_ARGS,
            *RUSTC_EDITION_ARGS,
        ]

    def _invoke_compiler(self) -> subprocess.CompletedProcess:
        match self.mode:
            case Mode.COMPILE:
                return subprocess.run(self._rustc(), capture_output=True)
            case Mode.TEST:
                return subprocess.run(self._rustc("--test"), capture_output=True)
            case Mode.CLIPPY:
                _write_manifest(CLIPPY_CARGO_TOML_PATH, self.name)
                # Build a binary too so the exercise can be run afterwards.
                subprocess.run(self._rustc(), capture_output=True)
                subprocess.run(
                    ["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                     *RUSTC_COLOR_ARGS],
                    capture_output=True,
                )
                return subprocess.run(
                    ["cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                     *RUSTC_COLOR_ARGS,
                     "--", "-D", "warnings", "-D", "clippy::float_cmp"],
                    capture_output=True,
                )
            case Mode.BUILD_SCRIPT:
                _write_manifest(BUILD_SCRIPT_CARGO_TOML_PATH, self.name)
                return subprocess.run(
                    ["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH],
                    capture_output=True,
                )
        raise ValueError(f"unknown mode: {self.mode}")

    def compile(self) -> CompiledExercise:
        """Compile the exercise; raise CompilationError on failure."""
        result = self._invoke_compiler()
        if result.returncode == 0:
            return CompiledExercise(self)
        clean()
        raise CompilationError(_output_of(result))

    def _run(self) -> ExerciseOutput:
        if self.mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput("", "")
        args = [temp_file_path()]
        if self.mode is Mode.TEST:
            args.append("--show-output")
        result = subprocess.run(args, capture_output=True)
        output = _output_of(result)
        if result.returncode != 0:
            raise ExerciseRunError(output)
        return output

    def state(self) -> State:
        """Return the exercise's state from its pending marker."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return State()
        lines = _source_lines(source)
        matched = next(
            (i for i, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)),
            None,
        )
        if matched is None:
            raise ValueError("pending marker spans several lines")
        first = max(matched - CONTEXT, 0)
        last = matched + CONTEXT
        return State(
            tuple(
                ContextLine(line, i + 1, i == matched)
                for i, line in enumerate(lines[first:last + 1], start=first)
            )
        )

    def looks_done(self) -> bool:
        """Return True when the pending marker has been removed."""
        return self.state().done()


def parse_exercises(text: str) -> list[Exercise]:
    """Parse the exercise list from info.toml text."""
    data = tomllib.loads(text)
    if "exercises" not in data:
        raise ValueError("missing field `exercises`")
    exercises = []
    for entry in data["exercises"]:
        try:
            exercises.append(
                Exercise(
                    name=entry["name"],
                    path=Path(entry["path"]),
                    mode=Mode(entry["mode"]),
                    hint=entry["hint"],
                )
            )
        except KeyError as exc:
            raise ValueError(f"missing field `{exc.args[0]}`") from exc
    return exercises


def load_exercises(path: str | os.PathLike) -> list[Exercise]:
    """Read and parse an info.toml file."""
    return parse_exercises(Path(path).read_text(encoding="utf-8"))