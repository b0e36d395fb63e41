"""Checking exercises in order and prompting on those still marked pending."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum, auto

from rich.console import Console
from rich.status import Status
from rich.text import Text

from rustlings.exercise import (
    CompilationError,
    CompiledExercise,
    Exercise,
    Mode,
    RunError,
)
from rustlings.ui import bold, success, use_emoji, warn

BAR_WIDTH = 60


class ExerciseFailed(Exception):
    """Raised when an exercise fails to compile, run or pass its tests."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"{exercise} failed")
        self.exercise = exercise


class VerificationFailed(Exception):
    """Raised by verify with the first exercise that is not finished."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"verification stopped at {exercise}")
        self.exercise = exercise


class _RunMode(Enum):
    INTERACTIVE = auto()
    NON_INTERACTIVE = auto()


def _console(stderr: bool = False) -> Console:
    return Console(stderr=stderr, highlight=False, soft_wrap=True, emoji=False)


def _status(message: str) -> Status:
    return _console(stderr=True).status(message)


def _show_progress(position: int, total: int, percentage: float) -> None:
    filled = BAR_WIDTH * position // total if total else BAR_WIDTH
    filled = min(filled, BAR_WIDTH)
    rest = BAR_WIDTH - filled
    head = ">" if rest else ""
    line = Text.assemble(
        "Progress: [",
        ("#" * filled, "green"),
        (head + "-" * max(rest - 1, 0), "red"),
        f"] {position}/{total} ({percentage:.1f} %)",
    )
    _console(stderr=True).print(line)


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool,
    success_hints: bool,
) -> None:
    """Check each exercise in turn; raise VerificationFailed at the first unfinished one."""
    num_done, total = progress
    position = num_done
    percentage = num_done / total * 100.0 if total else 0.0
    _show_progress(position, total, percentage)

    for exercise in exercises:
        try:
            done = _check(exercise, verbose, success_hints)
        except ExerciseFailed:
            done = False
        if not done:
            raise VerificationFailed(exercise)
        if total:
            percentage += 100.0 / total
        position += 1
        _show_progress(position, total, percentage)


def _check(exercise: Exercise, verbose: bool, success_hints: bool) -> bool:
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            return _compile_and_test(exercise, _RunMode.INTERACTIVE, verbose, success_hints)
        case Mode.COMPILE:
            return _compile_and_run_interactively(exercise, success_hints)
        case Mode.CLIPPY:
            return _compile_only(exercise, success_hints)


def test(exercise: Exercise, verbose: bool) -> None:
    """Compile and run the exercise's test harness; raise ExerciseFailed on failure."""
    _compile_and_test(exercise, _RunMode.NON_INTERACTIVE, verbose, False)


def _compile(exercise: Exercise, status: Status) -> CompiledExercise:
    try:
        return exercise.compile()
    except CompilationError as err:
        status.stop()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        raise ExerciseFailed(exercise) from err


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    with _status(f"Compiling {exercise}...") as status:
        _compile(exercise, status).close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _status(f"Compiling {exercise}...") as status:
        with _compile(exercise, status) as compiled:
            status.update(f"Running {exercise}...")
            try:
                output = compiled.run()
            except RunError as err:
                status.stop()
                warn(f"Ran {exercise} with errors")
                print(err.output.stdout)
                print(err.output.stderr)
                raise ExerciseFailed(exercise) from err
    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, run_mode: _RunMode, verbose: bool, success_hints: bool
) -> bool:
    with _status(f"Testing {exercise}...") as status:
        with _compile(exercise, status) as compiled:
            try:
                output = compiled.run()
            except RunError as err:
                status.stop()
                warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
                print(err.output.stdout)
                raise ExerciseFailed(exercise) from err
    if verbose:
        print(output.stdout)
    if run_mode is _RunMode.INTERACTIVE:
        return prompt_for_completion(exercise, None, success_hints)
    return True


_SUCCESS_VERBS = {
    Mode.COMPILE: "ran",
    Mode.TEST: "tested",
    Mode.CLIPPY: "compiled",
    Mode.BUILD_SCRIPT: "compiled",
}


def _success_message(mode: Mode, no_emoji: bool) -> str:
    match mode:
        case Mode.COMPILE:
            return "The code is compiling!"
        case Mode.TEST:
            return "The code is compiling, and the tests pass!"
        case Mode.CLIPPY:
            if no_emoji:
                return "The code is compiling, and Clippy is happy!"
            return "The code is compiling, and 📎 Clippy 📎 is happy!"
        case Mode.BUILD_SCRIPT:
            return "Build script works!"


def _separator() -> Text:
    return bold("=" * 20)


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise show where it is pending and return False."""
    context = exercise.state()
    if context is None:
        return True

    success(f"Successfully {_SUCCESS_VERBS[exercise.mode]} {exercise}!")

    no_emoji = not use_emoji()
    message = _success_message(exercise.mode, no_emoji)
    console = _console()

    print()
    if no_emoji:
        print(f"~*~ {message} ~*~")
    else:
        print(f"🎉 🎉  {message} 🎉 🎉")
    print()

    if prompt_output is not None:
        print("Output:")
        console.print(_separator())
        print(prompt_output)
        console.print(_separator())
        print()
    if success_hints:
        print("Hints:")
        console.print(_separator())
        print(exercise.hint)
        console.print(_separator())
        print()

    print("You can keep working on this exercise,")
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            bold("`I AM NOT DONE`"),
            " comment:",
        )
    )
    print()
    for context_line in context:
        console.print(
            Text.assemble(
                (f"{context_line.number:>2}", "bold blue"),
                " ",
                ("|", "blue"),
                "  ",
                (context_line.line, "bold" if context_line.important else ""),
            )
        )
    return False