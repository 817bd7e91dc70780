"""Expressions combining several columns into one value per row."""

from colhist.expression.evaluator import (
    ALLOWED_FUNCTIONS,
    DEFAULT_MARKER,
    ExpressionEvaluator,
    ExpressionSyntaxError,
    column_identifier,
)

__all__ = [
    "ALLOWED_FUNCTIONS",
    "DEFAULT_MARKER",
    "ExpressionEvaluator",
    "ExpressionSyntaxError",
    "column_identifier",
]
