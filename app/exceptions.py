"""Custom exceptions for the composer and the suggestion flow."""

from typing import Optional


class ComposerError(Exception):
    """Base class for errors raised by cv-composer."""


class UnknownSectionError(ComposerError, KeyError):
    """A section key that is neither a canonical key nor an alias."""

    def __init__(self, section: str):
        self.section = section
        super().__init__(f"Unknown section: {section!r}")

    def __str__(self) -> str:
        return self.args[0]


class SuggestionBusyError(ComposerError):
    """A second request was made on a control that is still waiting."""

    def __init__(self, control: str):
        self.control = control
        super().__init__(f"A suggestion for {control!r} is already pending")


class SuggestionFailure(ComposerError):
    """
    The improvement service failed or timed out.

    Attributes:
        control: Wire address of the control that issued the request
        cause: The underlying exception, if any
    """

    def __init__(self, control: str, cause: Optional[BaseException] = None):
        self.control = control
        self.cause = cause
        message = f"Could not get a suggestion for {control!r}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
