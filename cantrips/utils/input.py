"""
Interactive prompts

Every prompt goes through the builtin input(), so commands can be driven
by piped input and tests can patch it.
"""

import sys
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..errors import InvalidInputError, NonInteractiveError

logger = logging.getLogger(__name__)

# (value, description) pairs offered by select()
Choice = Tuple[str, str]


def check_not_interactive(force_non_interactive: bool):
    """Fails when a prompt is about to be shown in non-interactive mode"""
    if force_non_interactive:
        raise NonInteractiveError(
            "This action would become interactive but --force-non-interactive was given. "
            "Specify all the required options."
        )


def input_until(initial: str, prompt: str, test: Callable[[str], bool], error_message: str) -> str:
    """Prompts until the entered value (or the initial one, on empty input) passes the test"""
    while True:
        suffix = f" [{initial}]" if initial else ""
        value = input(f"{prompt}{suffix} ").strip() or initial
        if test(value):
            return value
        print(error_message, file=sys.stderr)


def given_or_input_until(given: Optional[str], initial: str, prompt: str, test: Callable[[str], bool],
                         error_message: str, force_non_interactive: bool = False) -> str:
    """
    Returns the given value when it passes the test; otherwise prompts for
    one (failing in non-interactive mode).
    """
    given = (given or "").strip()
    if given and test(given):
        return given
    if given:
        print(error_message, file=sys.stderr)
    check_not_interactive(force_non_interactive)
    return input_until(initial, prompt, test, error_message)


def select(message: str, choices: Sequence[Choice], initial: Optional[str] = None) -> str:
    """
    Shows a numbered menu and returns the chosen value.

    Args:
        message: Menu title
        choices: (value, description) pairs
        initial: Value chosen on empty input

    Returns:
        The selected value
    """
    if not choices:
        raise InvalidInputError(f"There are no options to choose from: {message}")

    values: List[str] = [value for value, _ in choices]
    print(message)
    for number, (value, description) in enumerate(choices, start=1):
        marker = "*" if value == initial else " "
        print(f" {marker}{number}. {description}")

    while True:
        answer = input("Choice: ").strip()
        if not answer and initial in values:
            return initial
        if answer.isdigit() and 1 <= int(answer) <= len(values):
            return values[int(answer) - 1]
        if answer in values:
            return answer
        print("Invalid choice.", file=sys.stderr)
