"""
Command-line entry point.

Usage:
    python -m src.sheet_alignment TEMPLATE SAMPLE -o aligned.png
    python -m src.sheet_alignment TEMPLATE SAMPLE -o aligned.png \\
        --marks-json marks.json --comparison comparison.png -v
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from src.mark_recognition import OptionRecognizer, load_recognition_config
from src.sheet_alignment.config_loader import DEFAULT_CONFIG_PATH, load_config
from src.sheet_alignment.exceptions import InputError
from src.sheet_alignment.image_loader import load_image
from src.sheet_alignment.processor import SheetAligner
from src.utils.io import save_image, save_json
from src.utils.visualization import draw_option_marks, plot_alignment_comparison

logger = logging.getLogger("sheet_alignment")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Align an answer-sheet photo to a reference template"
    )
    parser.add_argument("template", type=Path, help="Reference template image")
    parser.add_argument("sample", type=Path, help="Photographed or scanned sheet")
    parser.add_argument(
        "-o", "--output", type=Path, required=True, help="Where to write the aligned image"
    )
    parser.add_argument(
        "--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Configuration YAML"
    )
    parser.add_argument(
        "--marks-json", type=Path, help="Recognize option marks and write them as JSON"
    )
    parser.add_argument(
        "--marks-overlay", type=Path, help="Write the aligned image with marks outlined"
    )
    parser.add_argument(
        "--comparison", type=Path, help="Save a side-by-side original/aligned figure"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    aligner = SheetAligner(config=load_config(args.config))

    if not await aligner.initialize_with_template(args.template):
        logger.error(f"Could not initialize template: {aligner.last_error}")
        return 2

    try:
        sample = await load_image(args.sample)
    except InputError as e:
        logger.error(str(e))
        return 1

    result = await aligner.align_user_image(sample)
    if not result.is_success():
        logger.error(result.get_error_message())
        return 1

    save_image(result.image, args.output)
    logger.info(f"{result.get_error_message()}; wrote {args.output}")

    if args.comparison:
        plot_alignment_comparison(sample.to_numpy(), result.image, save_path=args.comparison)

    if args.marks_json or args.marks_overlay:
        recognizer = OptionRecognizer(load_recognition_config(args.config))
        recognition = recognizer.recognize(result.image)
        logger.info(recognition.message)
        if args.marks_json:
            save_json(recognition.to_dict(), args.marks_json)
        if args.marks_overlay:
            save_image(draw_option_marks(result.image, recognition.marks), args.marks_overlay)

    aligner.cleanup()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
