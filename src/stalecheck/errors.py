"""Exception hierarchy for stalecheck.

Only ProjectEnumerationError is fatal for a run. Everything raised while
evaluating audited code is caught at the evaluator boundary and surfaces
as an unresolved value instead.
"""

from __future__ import annotations


class StaleCheckError(Exception):
    """Base exception for all stalecheck errors."""


class ProjectEnumerationError(StaleCheckError):
    """The project's file set could not be enumerated at all."""


class ArithmeticExpressionError(StaleCheckError):
    """Raised when an arithmetic expression cannot be evaluated."""


class ArithmeticSyntaxError(ArithmeticExpressionError):
    """Raised when an arithmetic expression text is malformed."""

    def __init__(self, message: str, text: str = "", position: int = -1):
        self.text = text
        self.position = position
        if position >= 0 and text:
            pointer = " " * position + "^"
            message = f"{message}\n  {text}\n  {pointer}"
        super().__init__(message)
