"""Command-line entry point."""
from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Optional

from loguru import logger

from .errors import ShadowcalError
from .io.loader import load_calibration, load_screenshot_dimensions, load_shadows, save_record
from .io.records import calibration_from_record, shadows_from_record, shadows_to_record
from .logging import configure_logging
from .models.annotation_state import MIN_COMPLETE_OBJECTS, reproject_screenshot

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shadowcal", description="Room calibration and shadow record tools.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="loguru level name (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    summary = commands.add_parser("summary", help="Validate records and report what they contain")
    summary.add_argument("calibration", type=Path)
    summary.add_argument("--shadows", type=Path, default=None)
    summary.add_argument(
        "--image",
        type=Path,
        default=None,
        help="Screenshot used for the dimensions of legacy shadow records that lack them",
    )

    reproject = commands.add_parser("reproject", help="Recompute world3D of every shadow point")
    reproject.add_argument("calibration", type=Path)
    reproject.add_argument("shadows", type=Path)
    reproject.add_argument("--output", type=Path, default=None, help="Defaults to overwriting SHADOWS")
    reproject.add_argument(
        "--image",
        type=Path,
        default=None,
        help="Screenshot used for the dimensions of legacy shadow records that lack them",
    )
    return parser


def _load_screenshots(path: Path, image: Optional[Path]):
    dimensions = load_screenshot_dimensions(image) if image is not None else None
    return shadows_from_record(load_shadows(path), default_dimensions=dimensions)


def _summary(args: argparse.Namespace) -> None:
    calibration = calibration_from_record(load_calibration(args.calibration))
    room = calibration.room
    position = calibration.camera_position
    logger.info("Room {:.2f} x {:.2f} x {:.2f} m (width x depth x height)", room.width, room.depth, room.height)
    logger.info(
        "Camera at ({:.2f}, {:.2f}, {:.2f}) with vertical FOV {:.1f} deg",
        position.x,
        position.y,
        position.z,
        calibration.fov_y,
    )
    logger.info(
        "{}/{} screenshots calibrated; calibration {}",
        len(calibration.completed_steps),
        len(calibration.steps),
        "usable" if calibration.is_usable else "not usable yet",
    )

    if args.shadows is None:
        return
    for shots in _load_screenshots(args.shadows, args.image):
        complete = len(shots.complete_objects)
        logger.info(
            "{} ({}x{}): {} objects, {} complete, {} point pairs{}",
            shots.screenshot_id,
            shots.width,
            shots.height,
            len(shots.objects),
            complete,
            shots.pair_count,
            "" if complete >= MIN_COMPLETE_OBJECTS else " (needs more objects)",
        )


def _reproject(args: argparse.Namespace) -> None:
    calibration = calibration_from_record(load_calibration(args.calibration))
    screenshots = tuple(
        reproject_screenshot(shots, calibration) for shots in _load_screenshots(args.shadows, args.image)
    )
    save_record(args.output or args.shadows, shadows_to_record(screenshots))


def main(argv: Optional[list[str]] = None) -> int:
    """Run the ``shadowcal`` command line."""
    args = _build_parser().parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level)

    handlers = {"summary": _summary, "reproject": _reproject}
    try:
        handlers[args.command](args)
    except (ShadowcalError, OSError) as exc:
        logger.error("{}", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
