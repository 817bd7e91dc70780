"""Arithmetic expressions over row columns.

An expression refers to columns through placeholders: the marker character
followed by a 0-indexed column number. With the default marker, ``?0 + ?2``
adds the first and third columns of every row.

Expressions are validated once, up front, against a small arithmetic
whitelist and then evaluated per row with numexpr.
"""

from __future__ import annotations

import ast
import math
import re
from collections.abc import Mapping
from typing import Any

import numexpr
import numpy as np

from colhist.core.logging import get_logger
from colhist.core.models import MissingPolicy, Precision, RowError, RowErrorKind, RowResult
from colhist.parsing import ColumnParser

logger = get_logger(__name__)

DEFAULT_MARKER = "?"

IDENTIFIER_PREFIX = "c_"

# numexpr functions of one argument
ALLOWED_FUNCTIONS = frozenset(
    {
        "abs",
        "sqrt",
        "exp",
        "expm1",
        "log",
        "log10",
        "log1p",
        "sin",
        "cos",
        "tan",
        "arcsin",
        "arccos",
        "arctan",
        "sinh",
        "cosh",
        "tanh",
    }
)

CONSTANTS: dict[str, float] = {"pi": math.pi, "e": math.e}

_ALLOWED_BINOPS = (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Pow)
_ALLOWED_UNARYOPS = (ast.UAdd, ast.USub)

# Characters that already mean something in an expression
_RESERVED_MARKERS = set("+-*/^().,_ \t") | set("0123456789")


class ExpressionSyntaxError(ValueError):
    """The expression cannot be compiled. Raised once, at setup."""


def column_identifier(column: int) -> str:
    """Name the variable bound to a column inside a rewritten expression."""
    return f"{IDENTIFIER_PREFIX}{column}"


class _ExpressionValidator(ast.NodeTransformer):
    """Checks an expression tree against the arithmetic whitelist.

    Integer literals are rewritten as floats so numexpr never performs
    integer arithmetic.
    """

    def __init__(self, allowed_names: set[str]):
        self.allowed_names = allowed_names
        self.errors: list[str] = []

    def visit_Expression(self, node: ast.Expression) -> ast.AST:
        return self.generic_visit(node)

    def visit_BinOp(self, node: ast.BinOp) -> ast.AST:
        if not isinstance(node.op, _ALLOWED_BINOPS):
            self.errors.append(f"operator '{type(node.op).__name__}' is not supported")
        return self.generic_visit(node)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> ast.AST:
        if not isinstance(node.op, _ALLOWED_UNARYOPS):
            self.errors.append(f"operator '{type(node.op).__name__}' is not supported")
        return self.generic_visit(node)

    def visit_Constant(self, node: ast.Constant) -> ast.AST:
        value = node.value
        if isinstance(value, bool) or not isinstance(value, int | float):
            self.errors.append(f"literal {value!r} is not a number")
            return node
        try:
            return ast.copy_location(ast.Constant(value=float(value)), node)
        except OverflowError:
            self.errors.append(f"literal {value} is out of range")
            return node

    def visit_Name(self, node: ast.Name) -> ast.AST:
        if node.id not in self.allowed_names:
            self.errors.append(f"unknown name '{node.id}'")
        return node

    def visit_Call(self, node: ast.Call) -> ast.AST:
        if not isinstance(node.func, ast.Name) or node.func.id not in ALLOWED_FUNCTIONS:
            self.errors.append(f"unsupported function '{ast.unparse(node.func)}'")
            return node
        if node.keywords or len(node.args) != 1:
            self.errors.append(f"function '{node.func.id}' takes exactly one argument")
            return node
        node.args = [self.visit(arg) for arg in node.args]
        return node

    def generic_visit(self, node: ast.AST) -> ast.AST:
        allowed = (
            ast.Expression,
            ast.BinOp,
            ast.UnaryOp,
            ast.Constant,
            ast.Name,
            ast.Call,
            ast.Load,
            ast.operator,
            ast.unaryop,
        )
        if not isinstance(node, allowed):
            self.errors.append(f"'{type(node).__name__}' is not allowed in an expression")
            return node
        return super().generic_visit(node)


class ExpressionEvaluator:
    """Computes one value per row from an expression over its columns.

    The evaluator is immutable once built: it keeps the compiled expression
    and the column binding table, nothing else.
    """

    def __init__(self, expression: str, marker: str = DEFAULT_MARKER):
        if len(marker) != 1 or marker in _RESERVED_MARKERS or marker.isalnum():
            raise ValueError(f"invalid placeholder marker {marker!r}")

        self._expression = expression
        self._marker = marker
        self._columns, rewritten = self._rewrite_placeholders(expression, marker)
        self._source = self._compile(rewritten)
        self._bindings = tuple((column_identifier(col), col) for col in self._columns)

        logger.debug(
            "expression_compiled",
            expression=expression,
            rewritten=self._source,
            columns=list(self._columns),
        )

    @staticmethod
    def _rewrite_placeholders(expression: str, marker: str) -> tuple[tuple[int, ...], str]:
        pattern = re.compile(re.escape(marker) + r"(\d*)")
        columns: dict[int, None] = {}

        def substitute(match: re.Match[str]) -> str:
            digits = match.group(1)
            if not digits:
                raise ExpressionSyntaxError(
                    f"marker {marker!r} at position {match.start()} "
                    "is not followed by a column index"
                )
            column = int(digits)
            columns.setdefault(column, None)
            return column_identifier(column)

        rewritten = pattern.sub(substitute, expression)
        return tuple(columns), rewritten.replace("^", "**")

    def _compile(self, rewritten: str) -> str:
        if not rewritten.strip():
            raise ExpressionSyntaxError("expression is empty")
        try:
            tree = ast.parse(rewritten.strip(), mode="eval")
        except SyntaxError as e:
            raise ExpressionSyntaxError(f"invalid expression {self._expression!r}: {e.msg}") from e

        allowed_names = {column_identifier(col) for col in self._columns} | set(CONSTANTS)
        validator = _ExpressionValidator(allowed_names)
        tree = validator.visit(tree)
        if validator.errors:
            raise ExpressionSyntaxError(
                f"invalid expression {self._expression!r}: {'; '.join(validator.errors)}"
            )
        source = ast.unparse(tree)

        # Let numexpr reject anything its own parser cannot handle
        trial = {column_identifier(col): 1.0 for col in self._columns}
        try:
            self._numexpr_evaluate(source, trial)
        except ArithmeticError:
            # Constant arithmetic faults surface per row, not at setup
            pass
        except (SyntaxError, KeyError, TypeError, ValueError) as e:
            raise ExpressionSyntaxError(f"invalid expression {self._expression!r}: {e}") from e
        return source

    @staticmethod
    def _numexpr_evaluate(source: str, bound: Mapping[str, Any]) -> float:
        local_dict = {**CONSTANTS, **bound}
        with np.errstate(all="ignore"):
            return float(numexpr.evaluate(source, local_dict=local_dict, global_dict={}))

    @property
    def expression(self) -> str:
        """The expression as written."""
        return self._expression

    @property
    def source(self) -> str:
        """The rewritten expression handed to numexpr."""
        return self._source

    @property
    def columns(self) -> tuple[int, ...]:
        """Referenced columns, in order of first appearance."""
        return self._columns

    def parser(
        self,
        delimiter: str = ",",
        precision: Precision = Precision.FLOAT64,
        on_missing: MissingPolicy = MissingPolicy.ERROR,
    ) -> ColumnParser:
        """Build a column parser over exactly the referenced columns."""
        if not self._columns:
            raise ValueError(f"expression {self._expression!r} references no columns")
        return ColumnParser(self._columns, delimiter, precision, on_missing)

    def evaluate(
        self,
        values: Mapping[int, float],
        line_number: int | None = None,
        precision: Precision = Precision.FLOAT64,
    ) -> RowResult[float]:
        """Evaluate the expression with each placeholder bound to its column's value.

        Values are matched to placeholders by column index.
        """
        bound: dict[str, float] = {}
        for identifier, column in self._bindings:
            if column not in values:
                return RowResult.fail(
                    RowError(
                        kind=RowErrorKind.MISSING_COLUMN,
                        message=f"no value for column {column} referenced by the expression",
                        line_number=line_number,
                        column=column,
                    )
                )
            bound[identifier] = values[column]

        try:
            result = self._numexpr_evaluate(self._source, bound)
        except ArithmeticError as e:
            return RowResult.fail(RowError.failed_evaluation(str(e), line_number))

        with np.errstate(over="ignore"):
            value = Precision(precision).dtype.type(result)
        if not np.isfinite(value):
            return RowResult.fail(
                RowError.failed_evaluation(f"result is {float(value)} for {bound}", line_number)
            )
        return RowResult.ok(float(value))

    def evaluate_row(
        self, row: str, parser: ColumnParser, line_number: int | None = None
    ) -> RowResult[float]:
        """Parse a row and evaluate the expression over it.

        Parser failures (and skips) pass through unchanged.
        """
        parsed = parser.parse_row(row, line_number)
        if parsed.value is None:
            return RowResult(error=parsed.error)
        return self.evaluate(parsed.value, line_number, parser.precision)

    def __repr__(self) -> str:
        return f"ExpressionEvaluator({self._expression!r}, columns={list(self._columns)})"
