"""
Equation assembly - turns OCR output into the expression to evaluate.
"""
import re
from dataclasses import replace
from typing import Optional, Sequence

from core.constants import OPERATOR_PATTERN
from core.models import OcrExtraction


def assemble_equation(
    numbers: Sequence[str],
    operators: Sequence[str],
    freeform: Optional[str] = None
) -> str:
    """
    Decide which expression string to evaluate.

    When operators were detected and the model also produced a full
    expression, that expression is used as-is. Otherwise the numbers are
    summed: no detected operator means the user wants a simple total.

    Args:
        numbers: Recognized number tokens, in reading order
        operators: Recognized operator tokens
        freeform: Best-guess full expression, if any

    Returns:
        Expression string; empty when nothing was found
    """
    if operators and freeform:
        return freeform
    return ' + '.join(numbers)


def assemble_from_extraction(extraction: OcrExtraction) -> str:
    """Assemble the expression for a complete extraction."""
    return assemble_equation(
        extraction.numbers,
        extraction.operators,
        extraction.expression or None
    )


def fill_missing_operators(extraction: OcrExtraction) -> OcrExtraction:
    """
    Recover operators the model left out of its operator list.

    If an expression and several numbers came back without operators,
    the operators are read from the expression itself.

    Returns:
        A new extraction, or the same one when nothing changes
    """
    if extraction.expression and not extraction.operators and len(extraction.numbers) > 1:
        found = re.findall(OPERATOR_PATTERN, extraction.expression)
        if found:
            return replace(extraction, operators=tuple(found))
    return extraction
