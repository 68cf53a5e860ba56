"""Command-line entry point for working through the exercises."""

from __future__ import annotations

import argparse
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from rustdrill.checklist import cicv_verify
from rustdrill.exercise import Exercise, load_exercises
from rustdrill.project import RustAnalyzerProject
from rustdrill.run import reset, run
from rustdrill.ui import no_emoji
from rustdrill.verify import ExerciseFailed, verify
from rustdrill.watch import WatchStatus, watch

VERSION = "5.5.1"
INFO_FILE = "info.toml"

WELCOME = """\
       welcome to...
  ___ _ _ ___| |_  __| |_ _(_) | |
 | '_| | (_-<  _|/ _` | '_| | | |
 |_|  \\_,_/__/\\__|\\__,_|_| |_|_|_|"""

DEFAULT_OUT = """\
Thanks for installing rustdrill!

Is this your first time? Don't worry, these exercises are made for beginners!
Before you get started, here are a few notes about how things work:

1. The central concept is that you solve exercises. These exercises usually
   have some sort of syntax error in them, which will cause them to fail
   compilation or testing. Sometimes there's a logic error instead of a syntax
   error. No matter what error, it's your job to find it and fix it! You'll
   know when you fixed it because then the exercise will compile and the
   next exercise will come up.
2. If you run in watch mode (which we recommend), it'll automatically start
   with the first exercise. Don't get confused by an error message popping up
   as soon as you start! This is part of the exercise that you're supposed to
   solve, so open the exercise file in an editor and start your detective work!
3. If you're stuck on an exercise, there is a helpful hint you can view by
   typing 'hint' (in watch mode), or running `rustdrill hint exercise_name`.
4. If you want to use `rust-analyzer` with the exercises, which provides
   features like autocompletion, run the command `rustdrill lsp`.

Got all that? Great! To get started, run `rustdrill watch` in order to get the
first exercise. Make sure to have your editor open!"""

FINISH_LINE = """\
+----------------------------------------------------+
|          You made it to the finish line!           |
+----------------------------------------------------+

We hope you enjoyed learning about the various aspects of Rust!
You can also write your own exercises to help the greater community!"""

_REQUIRED_PREFIX = "the following arguments are required: "


class ExerciseNotFound(LookupError):
    """No exercise matches the requested name."""


class _Parser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        if message.startswith(_REQUIRED_PREFIX):
            names = message[len(_REQUIRED_PREFIX):].split(", ")
            text = "Required positional arguments not provided:\n" + "".join(
                f"    {name}\n" for name in names
            )
        else:
            text = f"{self.prog}: error: {message}\n"
        self.exit(1, text)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser with all subcommands."""
    parser = _Parser(
        prog="rustdrill",
        description="Small exercises to get you used to writing and reading Rust code.",
    )
    parser.add_argument(
        "--nocapture", action="store_true", help="show outputs from the test exercises"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="show the executable version"
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("verify", help="verify all exercises in the recommended order")

    watch_parser = sub.add_parser("watch", help="rerun `verify` when files are edited")
    watch_parser.add_argument(
        "--success-hints", action="store_true", help="show hints on success"
    )

    for name, text in (
        ("run", "run or test a single exercise"),
        ("reset", 'reset a single exercise using "git stash -- <filename>"'),
        ("hint", "print the hint for the given exercise"),
    ):
        command = sub.add_parser(name, help=text)
        command.add_argument("name", help="the name of the exercise")

    list_parser = sub.add_parser("list", help="list the available exercises")
    list_parser.add_argument(
        "-p", "--paths", action="store_true", help="show only the paths of the exercises"
    )
    list_parser.add_argument(
        "-n", "--names", action="store_true", help="show only the names of the exercises"
    )
    list_parser.add_argument(
        "-f",
        "--filter",
        help="match exercise names or paths; comma separated patterns are accepted",
    )
    list_parser.add_argument(
        "-u", "--unsolved", action="store_true", help="display only unsolved exercises"
    )
    list_parser.add_argument(
        "-s", "--solved", action="store_true", help="display only solved exercises"
    )

    sub.add_parser("lsp", help="enable rust-analyzer for exercises")
    sub.add_parser("cicvverify", help="check every exercise and write a JSON report")
    return parser


def find_exercise(name: str, exercises: Sequence[Exercise]) -> Exercise:
    """Return the named exercise, or the first unfinished one for ``next``."""
    if name == "next":
        found = next((e for e in exercises if not e.looks_done()), None)
        if found is None:
            raise ExerciseNotFound(
                "🎉 Congratulations! You have done all the exercises!\n"
                "🔚 There are no more exercises to do next!"
            )
        return found
    found = next((e for e in exercises if e.name == name), None)
    if found is None:
        raise ExerciseNotFound(f"No exercise found for '{name}'!")
    return found


def list_exercises(
    exercises: Sequence[Exercise],
    paths: bool = False,
    names: bool = False,
    filter: str | None = None,
    unsolved: bool = False,
    solved: bool = False,
) -> list[str]:
    """Return the lines of the exercise listing, ending with the progress line."""
    lines = []
    if not paths and not names:
        lines.append(f"{'Name':<17}\t{'Path':<46}\t{'Status':<7}")
    patterns = [p for p in (filter or "").lower().split(",") if p.strip()]
    done_count = 0
    for exercise in exercises:
        fname = str(exercise.path)
        done = exercise.looks_done()
        if done:
            done_count += 1
        status = "Done" if done else "Pending"
        filter_match = any(p in exercise.name or p in fname for p in patterns)
        solve_match = (done and solved) or (not done and unsolved) or (
            not solved and not unsolved
        )
        if not solve_match or not (filter_match or filter is None):
            continue
        if paths:
            lines.append(fname)
        elif names:
            lines.append(exercise.name)
        else:
            lines.append(f"{exercise.name:<17}\t{fname:<46}\t{status:<7}")
    total = len(exercises)
    percentage = done_count / total * 100.0 if total else float("nan")
    lines.append(
        f"Progress: You completed {done_count} / {total} exercises ({percentage:.1f} %)."
    )
    return lines


def _rustc_exists() -> bool:
    try:
        result = subprocess.run(["rustc", "--version"], stdout=subprocess.DEVNULL)
    except OSError:
        return False
    return result.returncode == 0


def _print_lines(lines: Sequence[str]) -> int:
    try:
        for line in lines:
            sys.stdout.write(line + "\n")
        sys.stdout.flush()
    except BrokenPipeError:
        return 0
    except OSError:
        return 1
    return 0


def _lsp() -> int:
    project = RustAnalyzerProject()
    try:
        project.get_sysroot_src()
    except OSError:
        print("Couldn't find toolchain path, do you have `rustc` installed?")
        return 1
    try:
        project.exercises_to_json()
    except OSError:
        print("Couldn't parse exercise files")
        return 1
    if not project.crates:
        print("Failed find any exercises, make sure you're in the exercises folder")
        return 0
    try:
        project.write_to_disk()
    except OSError:
        print("Failed to write rust-project.json to disk for rust-analyzer")
        return 0
    print("Successfully generated rust-project.json")
    print("rust-analyzer will now parse exercises, restart your language server or editor")
    return 0


def _watch(exercises: list[Exercise], verbose: bool, success_hints: bool) -> int:
    try:
        status = watch(exercises, verbose, success_hints)
    except OSError as exc:
        print(f"Error: Could not watch your progress. Error message was {exc!r}.")
        print(
            "Most likely you've run out of disk space or your 'inotify limit' "
            "has been reached."
        )
        return 1
    if status is WatchStatus.FINISHED:
        emoji = "★" if no_emoji() else "🎉"
        print(f"{emoji} All exercises completed! {emoji}")
        print(f"\n{FINISH_LINE}\n")
    else:
        print("We hope you're enjoying learning about Rust!")
        print(
            "If you want to continue working on the exercises at a later point, "
            "you can simply run `rustdrill watch` again"
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else (0 if exc.code is None else 1)

    if args.version:
        print(f"v{VERSION}")
        return 0

    if args.command is None:
        print(f"\n{WELCOME}\n")

    if not Path(INFO_FILE).exists():
        print(f"{sys.argv[0]} must be run from the exercises directory")
        print("Try `cd rustdrill/`!")
        return 1

    if not _rustc_exists():
        print("We cannot find `rustc`.")
        print("Try running `rustc --version` to diagnose your problem.")
        print("For instructions on how to install Rust, check the README.")
        return 1

    exercises = load_exercises(INFO_FILE)
    verbose = args.nocapture

    if args.command is None:
        print(f"{DEFAULT_OUT}\n")
        return 0

    try:
        match args.command:
            case "list":
                return _print_lines(
                    list_exercises(
                        exercises,
                        args.paths,
                        args.names,
                        args.filter,
                        args.unsolved,
                        args.solved,
                    )
                )
            case "run":
                run(find_exercise(args.name, exercises), verbose)
            case "reset":
                reset(find_exercise(args.name, exercises)).wait()
            case "hint":
                print(find_exercise(args.name, exercises).hint)
            case "verify":
                verify(exercises, (0, len(exercises)), verbose, False)
            case "cicvverify":
                cicv_verify(exercises)
            case "lsp":
                return _lsp()
            case "watch":
                return _watch(exercises, verbose, args.success_hints)
    except ExerciseNotFound as exc:
        print(exc)
        return 1
    except ExerciseFailed:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())