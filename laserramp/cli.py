# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Copyright (c) [2025] [Roman Tenger]
import os
import sys
import socket
import logging
import argparse
from datetime import datetime, timezone

from laserramp.config import (
    DEFAULT_CLOSURE_TOLERANCE,
    DEFAULT_OVERLAP,
    DEFAULT_PACE_DISTANCE_TENTHS,
    DEFAULT_PACE_INCREMENT,
    DEFAULT_START_PACE,
    RampConfig,
)
from laserramp.geometry import format_number
from laserramp.processor import DEFAULT_CHUNK_SIZE, LaserRampProcessor


# -----------------------------------------------------------------------------#
# RFC-5424 compliant formatter for logging.
# -----------------------------------------------------------------------------
class RFC5424Formatter(logging.Formatter):
    appname = "LaserRamp"
    # Facility user (1), severity informational (6).
    pri = "<14>"
    version = "1"

    def __init__(self, appname=None):
        super().__init__()
        if appname:
            self.appname = appname
        self.hostname = socket.gethostname()

    def format(self, record):
        timestamp = (
            datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z")
        )
        return (
            f"{self.pri}{self.version} {timestamp} {self.hostname} {self.appname} "
            f"{record.process} - {record.getMessage()}"
        )


# -----------------------------------------------------------------------------#
# Logging setup.
# -----------------------------------------------------------------------------
def setup_logging(level_str, log_dir=None):
    numeric_level = getattr(logging, level_str.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level_str}")

    formatter = RFC5424Formatter()
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    log_filename = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_filename = os.path.join(log_dir, f"laserramp_{timestamp}.log")
        file_handler = logging.FileHandler(log_filename, mode="a")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers)
    logging.info(
        "Logging initialized at level %s. Log file: %s",
        level_str.upper(),
        log_filename or "-",
    )


# -----------------------------------------------------------------------------#
# Derive the output name from the input name and the settings.
# -----------------------------------------------------------------------------
def output_filename(input_path, overlap, start_pace, pace_distance_tenths, pace_increment):
    directory = os.path.dirname(input_path)
    stem, ext = os.path.splitext(os.path.basename(input_path))
    parts = [
        stem,
        "ovr" + format_number(overlap),
        "sp" + format_number(start_pace),
        "pd" + format_number(pace_distance_tenths),
        "pi" + format_number(pace_increment),
    ]
    return os.path.join(directory, "-".join(parts) + ext)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Laser G-code post-processor: ramps the cutting pace at the start of every shape and overlaps closed shapes."
    )
    parser.add_argument("input", help="Path to the source G-code file")
    parser.add_argument(
        "--out",
        default=None,
        help="Output file. Derived from the input name and the settings if not provided.",
    )
    parser.add_argument(
        "-o",
        "--overlap",
        type=float,
        default=DEFAULT_OVERLAP,
        help="Length of path re-cut at the end of closed shapes (mm)",
    )
    parser.add_argument(
        "-p",
        "--start-pace",
        type=float,
        default=DEFAULT_START_PACE,
        help="Feed rate every shape starts at",
    )
    parser.add_argument(
        "-i",
        "--pace-increment",
        type=float,
        default=DEFAULT_PACE_INCREMENT,
        help="Feed rate added at every ramp step",
    )
    parser.add_argument(
        "-d",
        "--pace-distance",
        type=float,
        default=DEFAULT_PACE_DISTANCE_TENTHS,
        help="Distance between ramp steps, in tenths of a mm",
    )
    parser.add_argument(
        "--closure-tolerance",
        type=float,
        default=DEFAULT_CLOSURE_TOLERANCE,
        help="Max per-axis gap between start and end point of a closed shape (mm)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help="Number of characters read from the input at a time",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Trace every segment (same as --log-level DEBUG)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Also write a timestamped log file to this directory",
    )
    return parser


# -----------------------------------------------------------------------------#
# Main entry point.
# -----------------------------------------------------------------------------
def main(argv=None):
    args = build_parser().parse_args(argv)

    setup_logging("DEBUG" if args.verbose else args.log_level, args.log_dir)
    if args.out is None:
        args.out = output_filename(
            args.input,
            args.overlap,
            args.start_pace,
            args.pace_distance,
            args.pace_increment,
        )
    logging.info("Options: %s", vars(args))

    try:
        config = RampConfig.from_cli(
            overlap=args.overlap,
            start_pace=args.start_pace,
            pace_increment=args.pace_increment,
            pace_distance_tenths=args.pace_distance,
            closure_tolerance=args.closure_tolerance,
        )
        processor = LaserRampProcessor(config)
        shape_count = processor.process_file(args.input, args.out, args.chunk_size)
    except Exception as e:
        logging.error("Processing failed: %s", str(e))
        sys.exit(1)
    logging.info("==Success: %d shapes processed ==", shape_count)


if __name__ == "__main__":
    main()
