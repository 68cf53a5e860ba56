# rustdrill

rustdrill is a command-line driver for a collection of small Rust exercises. Each
exercise is a `.rs` file that fails to compile, fails its tests or upsets Clippy
until you fix it. rustdrill compiles and runs the exercises in order, shows what
went wrong, offers hints and keeps track of your progress.

## Requirements

- Python 3.11 or later
- A Rust toolchain with `rustc` on the `PATH` (`cargo` as well, for Clippy and
  build-script exercises; `git` for `reset`)
- An exercise directory with an `info.toml` file at its root

## Installation

```
pip install .
```

This installs the `rustdrill` command.

## The exercise list

rustdrill reads `info.toml` from the current directory. Every exercise needs a
name, a path, a mode and a hint:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the I AM NOT DONE comment."
```

The mode is one of:

- `compile`: built with `rustc` as a program, then run
- `test`: built with `rustc --test` as a test harness, then run
- `clippy`: built with `rustc`, then linted with `cargo clippy`, treating
  warnings and `clippy::float_cmp` as errors; rustdrill writes the manifest to
  `exercises/clippy/Cargo.toml`
- `buildscript`: run with `cargo test`, using a manifest that rustdrill writes to
  `exercises/tests/Cargo.toml`

Programs are built with `--edition 2021` into a temporary binary in the current
directory, which is removed again afterwards.

An exercise counts as finished once it builds and passes and no line of the form
`// I AM NOT DONE` (or `/// I AM NOT DONE`) is left in its file. While the marker
is still there, a passing exercise is reported as successful, followed by the
lines around the marker.

## Usage

Run every command from the directory that holds `info.toml`.

```
rustdrill                 # welcome text and a short introduction
rustdrill --version       # print the version
rustdrill watch           # verify in order, re-checking whenever a file changes
rustdrill verify          # verify every exercise once, stopping at the first failure
rustdrill run intro1      # build and run a single exercise
rustdrill run next        # the first exercise that is not marked as done
rustdrill hint intro1     # show the hint for an exercise
rustdrill reset intro1    # throw away your changes with `git stash -- <path>`
rustdrill list            # table of names, paths and Done/Pending status
rustdrill lsp             # write rust-project.json for rust-analyzer
rustdrill cicvverify      # grade every exercise and write a JSON report
```

`--nocapture` before the subcommand shows the output of test exercises:

```
rustdrill --nocapture run testSuccess
```

A command exits with status 1 when `info.toml` is missing, when `rustc` cannot
be found, when the named exercise does not exist, when an exercise fails, or
when the arguments are wrong.

### Listing

```
rustdrill list --paths          # paths only
rustdrill list --names          # names only
rustdrill list --filter if,var  # names or paths containing any of the patterns
rustdrill list --solved         # only finished exercises
rustdrill list --unsolved       # only unfinished exercises
```

The listing ends with a progress line such as
`Progress: You completed 3 / 20 exercises (15.0 %).`

### Watch mode

`rustdrill watch` stops at the first exercise that does not pass and checks
again every time a `.rs` file under `exercises/` is created or saved: first the
changed exercise, then every exercise that is not done yet. While it waits you
can type:

- `hint`: the hint for the current exercise
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, such as `!rustc --explain E0381`
- `help`: list these commands

`rustdrill watch --success-hints` also shows an exercise's hint once it passes.

### Grading

`rustdrill cicvverify` runs every exercise concurrently and writes a report to
`.github/result/check_result.json` (the directory must already exist). The
report holds a list of exercises with their name and result, a `user_name`
field, and statistics: the number of exercises, successes and failures, and the
time taken in seconds.

### rust-analyzer

`rustdrill lsp` adds a crate for every `.rs` file under `exercises/` and writes
`rust-project.json` to the current directory. The standard library source path
comes from `RUST_SRC_PATH` if set, otherwise from `rustc --print sysroot`.

## Using it from Python

- `rustdrill.exercise.load_exercises(path)` reads an `info.toml` file and returns
  a list of `Exercise` objects; `Exercise.state()` and `Exercise.looks_done()`
  report whether the marker is still there.
- `rustdrill.verify.verify(exercises)` checks exercises in turn and raises
  `ExerciseFailed` at the first one that does not pass or is still pending.
- `rustdrill.run.run(exercise)` builds and runs a single exercise.
- `rustdrill.checklist.cicv_verify(exercises, output_path)` grades all exercises,
  writes the JSON report and returns it as an `ExerciseCheckList`.
- `rustdrill.cli.main(argv)` runs the command line and returns its exit status.

## Environment

- `NO_EMOJI`: when set, plain symbols are printed in place of emoji.
- `RUST_SRC_PATH`: when set, `rustdrill lsp` uses it as the standard library
  source path rather than asking `rustc`.