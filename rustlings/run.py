"""Running a single exercise and resetting it with git."""

from __future__ import annotations

import subprocess

from rich.console import Console

from rustlings.exercise import CompilationError, Exercise, Mode, RunError
from rustlings.ui import success, warn
from rustlings.verify import ExerciseFailed, test


def run(exercise: Exercise, verbose: bool) -> None:
    """Compile and run (or test) the exercise; raise ExerciseFailed on failure."""
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            test(exercise, verbose)
        case Mode.COMPILE | Mode.CLIPPY:
            _compile_and_run(exercise)


def reset(exercise: Exercise) -> subprocess.Popen:
    """Start `git stash -- <path>` for the exercise and return the process."""
    try:
        return subprocess.Popen(["git", "stash", "--", str(exercise.path)])
    except OSError as err:
        raise ExerciseFailed(exercise) from err


def _compile_and_run(exercise: Exercise) -> None:
    console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)
    with console.status(f"Compiling {exercise}...") as status:
        try:
            compiled = exercise.compile()
        except CompilationError as err:
            status.stop()
            warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
            print(err.output.stderr)
            raise ExerciseFailed(exercise) from err

        with compiled:
            status.update(f"Running {exercise}...")
            try:
                output = compiled.run()
            except RunError as err:
                status.stop()
                print(err.output.stdout)
                print(err.output.stderr)
                warn(f"Ran {exercise} with errors")
                raise ExerciseFailed(exercise) from err

    print(output.stdout)
    success(f"Successfully ran {exercise}")