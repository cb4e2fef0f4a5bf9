#!/usr/bin/env python3
"""
SnapCrop - Main Entry Point.

Command-line front end for SnapCrop: pick or capture an image, then
either detect and crop objects or recognize text for an invoice.

Usage:
    Command Line:
        python main.py detect --input shelf.jpg --output outputs/shelf
        python main.py detect --camera --display-width 640
        python main.py recognize --input receipt.png --excel

    Python:
        from main import run_detection
        state = run_detection("shelf.jpg")

Author: SnapCrop Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ConfigurationManager
from snapcrop.utils.logger import LOGGER_NAMESPACE, get_logger, setup_logger_from_config
from snapcrop.session import ImageSession, SessionState, Status
from snapcrop.utils.exceptions import SnapCropError


def positive_int(value: str) -> int:
    """argparse type for widths that must be at least one pixel."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="snapcrop",
        description="Detect and crop objects, or recognize invoice text, in an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Crop every detected object:
        snapcrop detect --input shelf.jpg --output outputs/shelf

    Recognize text from the camera and draft an invoice:
        snapcrop recognize --camera --excel
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Detect objects and crop them")
    recognize = subparsers.add_parser("recognize", help="Recognize text and numbers")

    for sub in (detect, recognize):
        source = sub.add_mutually_exclusive_group(required=True)
        source.add_argument("--input", "-i", type=str, help="Input image file")
        source.add_argument("--camera", action="store_true", help="Capture a still from the camera")
        sub.add_argument(
            "--output", "-o",
            type=str,
            default=None,
            help="Output directory (default: paths.output_dir from config)"
        )

    detect.add_argument(
        "--display-width",
        type=positive_int,
        default=None,
        help="Width of the display column the image is laid out in"
    )
    recognize.add_argument(
        "--excel",
        action="store_true",
        help="Also write an Excel invoice draft"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Load configuration and set up logging.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()

    if args.debug:
        logging.getLogger(LOGGER_NAMESPACE).setLevel(logging.DEBUG)
        for handler in logging.getLogger(LOGGER_NAMESPACE).handlers:
            handler.setLevel(logging.DEBUG)

    logger.info(f"SnapCrop {config.get('project.version', '1.0.0')} - {args.command}")
    return config


def load_image(session: ImageSession, input_path: Optional[str], camera: bool) -> SessionState:
    """Select a file or capture from the camera."""
    if camera:
        return session.capture_from_camera()
    return session.select_image(input_path)


def run_detection(
    input_path: Optional[str] = None,
    camera: bool = False,
    output_dir: Optional[str] = None,
    display_width: Optional[int] = None,
    session: Optional[ImageSession] = None
) -> SessionState:
    """
    Detect objects in one image and save overlay and crops.

    Args:
        input_path: Image file to process.
        camera: Capture from the camera instead of reading a file.
        output_dir: Where to write artefacts.
        display_width: Display column width for layout.
        session: Optional pre-built session.

    Returns:
        Final session state.
    """
    from snapcrop.output_handler import OutputHandler

    session = session or ImageSession(max_width=display_width)
    state = load_image(session, input_path, camera)
    if state.has_error:
        return state

    state = session.detect_objects()
    if state.status is Status.COMPLETED:
        OutputHandler(output_dir=output_dir).save_detection(state)
    return state


def run_recognition(
    input_path: Optional[str] = None,
    camera: bool = False,
    output_dir: Optional[str] = None,
    excel: bool = False,
    session: Optional[ImageSession] = None
) -> SessionState:
    """
    Recognize text in one image and save the results.

    Returns:
        Final session state.
    """
    from snapcrop.output_handler import OutputHandler

    session = session or ImageSession()
    state = load_image(session, input_path, camera)
    if state.has_error:
        return state

    state = session.recognize_text()
    if state.recognition is not None:
        OutputHandler(output_dir=output_dir, excel_enabled=excel or None).save_recognition(state)
    return state


def report(state: SessionState) -> None:
    """Print the user-facing outcome of a pass."""
    if state.message:
        stream = sys.stderr if state.has_error else sys.stdout
        print(state.message, file=stream)

    for index, region in enumerate(state.regions, 1):
        width, height = region.size
        print(f"{index:2d}. {region.label} ({region.score * 100:.2f}%) {width}x{height}")

    if state.recognition is not None and state.recognition.has_text:
        print(state.recognition.text)
        print(f"Numbers: {state.recognition.numbers_display}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success or no results, 1 for errors).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        if args.command == "detect":
            state = run_detection(
                input_path=args.input,
                camera=args.camera,
                output_dir=args.output,
                display_width=args.display_width
            )
        else:
            state = run_recognition(
                input_path=args.input,
                camera=args.camera,
                output_dir=args.output,
                excel=args.excel
            )

        report(state)
        logger.debug(f"Finished with status: {state.status.value}")
        return 1 if state.has_error else 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except SnapCropError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
