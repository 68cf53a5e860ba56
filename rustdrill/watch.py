"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import enum
import itertools
import os
import queue
import subprocess
import sys
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from rustdrill.exercise import Exercise
from rustdrill.verify import ExerciseFailed, verify

_POLL_SECONDS = 1.0
_DEBOUNCE_SECONDS = 0.5

_HELP = (
    "Commands available to you in watch mode:\n"
    "  hint   - prints the current exercise's hint\n"
    "  clear  - clears the screen\n"
    "  quit   - quits watch mode\n"
    "  !<cmd> - executes a command, like `!rustc --explain E0381`\n"
    "  help   - displays this help message\n"
    "\n"
    "Watch mode automatically re-evaluates the current exercise\n"
    "when you edit a file's contents."
)


class WatchStatus(enum.Enum):
    """How watch mode ended."""

    FINISHED = "finished"
    UNFINISHED = "unfinished"


class WatchShell:
    """Reads commands while watch mode runs."""

    def __init__(self, hint: str | None = None, stream: TextIO | None = None) -> None:
        self._hint = hint
        self._lock = threading.Lock()
        self._stream = stream
        self.should_quit = threading.Event()

    @property
    def hint(self) -> str | None:
        with self._lock:
            return self._hint

    @hint.setter
    def hint(self, value: str | None) -> None:
        with self._lock:
            self._hint = value

    def handle_command(self, line: str) -> None:
        """Carry out one command line."""
        command = line.strip()
        if command == "hint":
            hint = self.hint
            if hint is not None:
                print(hint)
        elif command == "clear":
            print("\x1b[2J\x1b[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(_HELP)
        elif command.startswith("!"):
            cmd = command[1:]
            parts = cmd.split()
            if not parts:
                print("no command provided")
                return
            try:
                subprocess.run(parts)
            except OSError as exc:
                print(f"failed to execute command `{cmd}`: {exc}")
        else:
            print(f"unknown command: {command}")

    def start(self) -> threading.Thread:
        """Start reading commands on a background thread."""
        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        thread = threading.Thread(target=self._read_commands, daemon=True)
        thread.start()
        return thread

    def _read_commands(self) -> None:
        stream = self._stream if self._stream is not None else sys.stdin
        while True:
            try:
                line = stream.readline()
            except (OSError, ValueError) as exc:
                print(f"error reading command: {exc}")
                return
            if not line:
                return
            self.handle_command(line)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue) -> None:
        super().__init__()
        self._events = events

    def on_created(self, event: FileSystemEvent) -> None:
        self._push(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._push(event)

    def _push(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(Path(os.fsdecode(event.src_path)))


def _clear_screen() -> None:
    print("\x1bc")


def _path_ends_with(path: Path, suffix: Path) -> bool:
    tail = Path(suffix).parts
    return len(tail) <= len(path.parts) and path.parts[len(path.parts) - len(tail):] == tail


def _next_changes(events: queue.Queue) -> list[Path]:
    """Wait briefly for a change, then gather the burst that follows it."""
    try:
        changed = [events.get(timeout=_POLL_SECONDS)]
    except queue.Empty:
        return []
    while True:
        try:
            changed.append(events.get(timeout=_DEBOUNCE_SECONDS))
        except queue.Empty:
            break
    return list(dict.fromkeys(changed))


def watch(
    exercises: Iterable[Exercise],
    verbose: bool = False,
    success_hints: bool = False,
) -> WatchStatus:
    """Verify the exercises, then re-verify on every change until done or quit."""
    exercises = list(exercises)
    events: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeHandler(events), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
        except ExerciseFailed as exc:
            shell = WatchShell(exc.exercise.hint)
        else:
            return WatchStatus.FINISHED
        shell.start()
        while True:
            for path in _next_changes(events):
                if path.suffix != ".rs" or not path.exists():
                    continue
                filepath = path.resolve()
                current = next(
                    (e for e in exercises if _path_ends_with(filepath, e.path)), None
                )
                pending = itertools.chain(
                    [current] if current is not None else [],
                    (
                        e
                        for e in exercises
                        if not e.looks_done() and not _path_ends_with(filepath, e.path)
                    ),
                )
                num_done = sum(1 for e in exercises if e.looks_done())
                _clear_screen()
                try:
                    verify(pending, (num_done, len(exercises)), verbose, success_hints)
                except ExerciseFailed as exc:
                    shell.hint = exc.exercise.hint
                else:
                    return WatchStatus.FINISHED
            if shell.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()