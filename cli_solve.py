#!/usr/bin/env python3
"""
CLI runner for the scan-and-solve pipeline.

Provides command-line interface for solving a photo or evaluating an
expression without starting the API.
"""
import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from openai import AsyncOpenAI

from config.logging_config import configure_logging
from config.settings import settings
from core.constants import POLICY_PERMISSIVE, POLICY_STRICT, NO_EQUATION_LABEL
from core.exceptions import CalcScanError, ProcessingError
from core.models import RectRegion
from services.enhance_service import EnhancementService
from services.ocr_service import OCRService
from services.solver_service import SolverService
from utils.expression_utils import evaluate_expression, format_result
from utils.image_utils import image_to_data_uri, load_image_bytes


async def solve_image_cli(file_path: str, region=None, enhance: bool = True) -> int:
    """Solve the arithmetic in an image file and print the result."""

    print("=" * 60)
    print(f"Solving: {file_path}")
    print("=" * 60)

    if not os.path.exists(file_path):
        print(f"❌ Error: File not found: {file_path}")
        return 1

    try:
        with open(file_path, 'rb') as f:
            img = load_image_bytes(
                f.read(),
                max_bytes=settings.max_upload_bytes,
                max_size=None if region else settings.max_image_size
            )
    except CalcScanError as e:
        print(f"❌ Error: {e}")
        return 1

    print(f"Image size: {img.size[0]}x{img.size[1]}")
    if region:
        print(f"Region: {region.to_dict()}")

    client = AsyncOpenAI(
        api_key=settings.openai_api_key or None,
        base_url=settings.openai_base_url
    )
    solver = SolverService(
        ocr_service=OCRService(client=client, model=settings.ocr_model, **settings.get_ocr_params()),
        enhance_service=EnhancementService(
            client=client,
            model=settings.enhance_model,
            enabled=enhance and settings.enhance_enabled
        ),
        policy=settings.expression_policy,
        crop_format=settings.crop_output_format,
        crop_max_pixels=settings.max_crop_pixels
    )

    print("\nProcessing with the model...")
    try:
        outcome = await solver.solve(image_to_data_uri(img), region)
    except ProcessingError as e:
        print(f"❌ {e.user_message}")
        return 1

    if not outcome.expression:
        print(f"⚠️  {NO_EQUATION_LABEL}")
        return 0

    print(f"✓ Expression: {outcome.expression}")
    print(f"✓ Result: {format_result(outcome.result)}")
    return 0


def evaluate_cli(expression: str, strict: bool = False) -> int:
    """Evaluate an expression and print the result."""
    policy = POLICY_STRICT if strict else POLICY_PERMISSIVE
    result = evaluate_expression(expression, policy)
    print(format_result(result))
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Scan handwritten arithmetic and solve it"
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    solve_parser = subparsers.add_parser('solve', help='Solve the arithmetic in an image')
    solve_parser.add_argument('image', help='Path to the image file')
    solve_parser.add_argument(
        '--region', nargs=4, type=float, metavar=('X', 'Y', 'W', 'H'),
        help='Pixel rectangle to crop before processing'
    )
    solve_parser.add_argument(
        '--no-enhance', action='store_true',
        help='Skip the image enhancement step'
    )

    eval_parser = subparsers.add_parser('eval', help='Evaluate an expression')
    eval_parser.add_argument('expression', help='Arithmetic expression, e.g. "2 × 3 + 4"')
    eval_parser.add_argument(
        '--strict', action='store_true',
        help='Reject expressions with unknown characters instead of stripping them'
    )

    args = parser.parse_args()
    configure_logging(settings.log_level)

    if args.command == 'solve':
        region = RectRegion(*args.region) if args.region else None
        return asyncio.run(solve_image_cli(args.image, region, enhance=not args.no_enhance))

    return evaluate_cli(args.expression, strict=args.strict)


if __name__ == "__main__":
    sys.exit(main())
