"""
Constants and configuration values for the scan-and-solve workflow.
"""

# Localized arithmetic glyphs mapped to their ASCII operator
OPERATOR_GLYPHS = {
    '×': '*',
    '✕': '*',
    '·': '*',
    '÷': '/',
    '∕': '/',
    '−': '-',   # U+2212 minus sign
    '–': '-',   # en dash
}

# Characters allowed in a sanitized expression
ALLOWED_CHARS_PATTERN = r'[0-9+\-*/.()\s]'
DISALLOWED_CHARS_PATTERN = r'[^0-9+\-*/.()\s]'

# Dangling operators/decimal points at the end of an expression
TRAILING_OPERATORS_PATTERN = r'[+\-*/.]+$'

# Redundant leading zeros of a number ("007" but not "0.5")
LEADING_ZEROS_PATTERN = r'(?<![\d.])0+(?=\d)'

# Operators recognized inside a free-form expression
OPERATOR_PATTERN = r'[+\-*/]'

# Expression strictness policies
POLICY_PERMISSIVE = 'permissive'
POLICY_STRICT = 'strict'
EXPRESSION_POLICIES = (POLICY_PERMISSIVE, POLICY_STRICT)

# Display strings
INVALID_EXPRESSION_LABEL = 'Invalid Expression'
NO_EQUATION_LABEL = 'No equation found'

# Solve outcome statuses
STATUS_SOLVED = 'solved'
STATUS_NO_EQUATION = 'no_equation'
STATUS_INVALID = 'invalid'

# Default quadrilateral corners (fractions of width/height), clockwise from top-left
DEFAULT_CORNERS = (
    (0.1, 0.1),
    (0.9, 0.1),
    (0.9, 0.9),
    (0.1, 0.9),
)

# Model prompts
OCR_PROMPTS = {
    'system': (
        "You are an OCR tool specialized in recognizing handwritten or printed "
        "mathematical expressions. Extract the mathematical expression from the image. "
        "Identify all numbers and operators (+, -, *, /) distinctly. "
        "For the expression, use standard operators like '*' for multiplication "
        "and '/' for division."
    ),
    'extract': (
        "Analyze the following image and extract the mathematical content. "
        "Respond with a JSON object with the keys 'expression' (the full expression, "
        "e.g. \"2 + 2 * 5\"), 'numbers' (list of number strings, e.g. [\"2\", \"2\", \"5\"]) "
        "and 'operators' (list of operators, e.g. [\"+\", \"*\"])."
    ),
}

ENHANCE_PROMPT = (
    "Enhance this image for OCR accuracy. Improve contrast, sharpen text, and "
    "remove shadows. Return just the final processed image."
)

# Default OCR parameters
DEFAULT_OCR_PARAMS = {
    'max_tokens': 1024,
    'temperature': 0.0,
    'max_image_size': 2048,
}

# Image formats accepted for crop output, with their MIME types
IMAGE_MIME_TYPES = {
    'JPEG': 'image/jpeg',
    'PNG': 'image/png',
    'WEBP': 'image/webp',
}

# Data URI pattern: data:<mime>;base64,<payload>
DATA_URI_PATTERN = r'^data:(?P<mime>[\w/+.-]+)?(?:;[\w=.-]+)*;base64,(?P<data>.*)$'
