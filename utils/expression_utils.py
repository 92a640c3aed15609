"""
Expression utilities: sanitizing and evaluating arithmetic strings.

The grammar is the four binary operators, decimals and parentheses.
Evaluation never raises; an unusable expression evaluates to NaN, which
is the "invalid expression" marker throughout the workflow.
"""
import ast
import logging
import math
import operator
import re
from typing import Optional

from core.constants import (
    OPERATOR_GLYPHS,
    DISALLOWED_CHARS_PATTERN,
    TRAILING_OPERATORS_PATTERN,
    LEADING_ZEROS_PATTERN,
    POLICY_PERMISSIVE,
    POLICY_STRICT,
    EXPRESSION_POLICIES,
    INVALID_EXPRESSION_LABEL,
)

logger = logging.getLogger(__name__)

INVALID_EXPRESSION = float('nan')

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def is_invalid(value: float) -> bool:
    """Check whether an evaluation result is the invalid marker."""
    return value is None or math.isnan(value)


def normalize_symbols(expression: str) -> str:
    """
    Replace localized multiplication/division glyphs with ASCII operators.

    Args:
        expression: Raw expression text

    Returns:
        Expression with only ASCII operators
    """
    for glyph, ascii_op in OPERATOR_GLYPHS.items():
        expression = expression.replace(glyph, ascii_op)
    return expression


def sanitize_expression(raw: str, policy: str = POLICY_PERMISSIVE) -> Optional[str]:
    """
    Normalize an expression into the restricted arithmetic grammar.

    Args:
        raw: Expression typed by the user or returned by OCR
        policy: 'permissive' strips unknown characters and dangling
            trailing operators; 'strict' rejects any unknown character

    Returns:
        Sanitized expression, or None if the strict policy rejects it
    """
    if policy not in EXPRESSION_POLICIES:
        raise ValueError(f"Unknown expression policy: '{policy}'")

    expression = normalize_symbols(raw or "")

    if policy == POLICY_STRICT:
        if re.search(DISALLOWED_CHARS_PATTERN, expression):
            return None
        return expression.strip()

    expression = re.sub(DISALLOWED_CHARS_PATTERN, '', expression)
    expression = re.sub(TRAILING_OPERATORS_PATTERN, '', expression.strip())
    return expression.strip()


def _eval_node(node) -> float:
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return float(node.value)
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        return _BINARY_OPS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise ValueError(f"Unsupported syntax: {type(node).__name__}")


def evaluate_expression(raw: str, policy: str = POLICY_PERMISSIVE) -> float:
    """
    Evaluate an arithmetic expression to a finite float.

    Args:
        raw: Expression text, possibly with localized glyphs
        policy: Sanitizing policy, see sanitize_expression

    Returns:
        The result, or INVALID_EXPRESSION (NaN) when the expression is
        empty, malformed, divides by zero or is not finite
    """
    expression = sanitize_expression(raw, policy)
    if not expression:
        return INVALID_EXPRESSION

    # Newlines end a statement for the parser, and integer literals may not
    # carry leading zeros
    expression = ' '.join(expression.split())
    expression = re.sub(LEADING_ZEROS_PATTERN, '', expression)

    try:
        tree = ast.parse(expression, mode='eval')
        result = _eval_node(tree.body)
    except (SyntaxError, ValueError, ZeroDivisionError, OverflowError,
            RecursionError, MemoryError) as e:
        logger.debug("Evaluation error for %r: %s", raw, e)
        return INVALID_EXPRESSION

    if not math.isfinite(result):
        logger.debug("Non-finite result for %r: %s", raw, result)
        return INVALID_EXPRESSION

    return result


def format_result(value: float) -> str:
    """Render an evaluation result for display."""
    if is_invalid(value):
        return INVALID_EXPRESSION_LABEL
    if value == int(value):
        return str(int(value))
    return repr(value)
