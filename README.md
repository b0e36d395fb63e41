# rustlings

A runner for small Rust exercises. Each exercise is a Rust source file listed
in an `info.toml` file. `rustlings` compiles it with `rustc` (or checks it with
`cargo clippy`, or runs `cargo test` for build-script exercises), runs it or
its tests, and tells you how you are doing.

An exercise counts as unfinished while its source still holds a marker comment
such as `// I AM NOT DONE`. Delete that line once the exercise compiles and
passes, and `rustlings` moves on to the next one.

## Requirements

- Python 3.11 or newer
- A Rust toolchain with `rustc` on the `PATH` (and `cargo` for Clippy and
  build-script exercises)
- `git`, for the `reset` command

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## The exercise list

Commands must be run from a directory that holds `info.toml`, which lists the
exercises in order:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the I AM NOT DONE comment."
```

`mode` is one of `compile`, `test`, `clippy` or `buildscript`. Clippy
exercises write a manifest to `exercises/clippy/Cargo.toml`; build-script
exercises write one to `exercises/tests/Cargo.toml`.

## Usage

```
rustlings                  # welcome text and a short introduction
rustlings watch            # verify exercises in order, re-run on every save
rustlings verify           # verify all exercises once, in order
rustlings run <name>       # compile and run (or test) a single exercise
rustlings run next         # run the first exercise not yet done
rustlings hint <name>      # print the hint for an exercise
rustlings reset <name>     # run `git stash -- <path>` for an exercise
rustlings list             # list exercises with their status
rustlings lsp              # write rust-project.json for rust-analyzer
rustlings cicvverify       # grade every exercise and write a JSON report
rustlings --version
```

`next` works as a name for `run`, `reset` and `hint` alike. The command exits
with status 1 when an exercise fails, when no exercise matches the name, when
`info.toml` is missing or when `rustc` cannot be run.

Options:

- `--nocapture` shows the output of test exercises.
- `watch --success-hints` prints the hint whenever an exercise succeeds.
- `list` accepts `--paths`/`-p`, `--names`/`-n`, `--filter`/`-f <patterns>`
  (comma separated, matched against names and paths), `--unsolved`/`-u` and
  `--solved`/`-s`. It ends with a progress line.

Set `NO_EMOJI` in the environment to replace emoji with plain characters.

### Watch mode

`watch` verifies the exercises, then re-verifies whenever a `.rs` file under
`./exercises` is created or changed, starting with the changed exercise. While
it runs you can type:

- `hint` – print the hint of the exercise that last failed
- `clear` – clear the screen
- `quit` – leave watch mode
- `!<cmd>` – run a command, e.g. `!rustc --explain E0381`
- `help` – list these commands

### Grading

`rustlings cicvverify` runs every exercise on a pool of threads, prints
progress as each finishes, and writes per-exercise pass/fail and totals as
JSON to `.github/result/check_result.json`. That directory must already exist.

### rust-analyzer

`rustlings lsp` adds a crate for every `.rs` file under `./exercises` and
writes `rust-project.json`. The standard library sources are taken from
`RUST_SRC_PATH` if set, otherwise from `rustc --print sysroot`.

## Using it as a library

```python
from rustlings.exercise import load_exercises
from rustlings.verify import verify, VerificationFailed

exercises = load_exercises("info.toml")
try:
    verify(exercises, (0, len(exercises)), verbose=False, success_hints=False)
except VerificationFailed as failure:
    print(failure.exercise.hint)
```

Other entry points: `rustlings.run.run` and `rustlings.run.reset` for a single
exercise, `Exercise.state()` for the lines around the pending marker (or
`None` when done), `rustlings.checklist.cicv_verify` for grading and
`rustlings.project.RustAnalyzerProject` for `rust-project.json`.

## What it does not do

The package holds only the runner. It ships no exercises and no `info.toml`;
you supply both.