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
import logging

from laserramp.commands import normalize_commands
from laserramp.extractor import ShapeExtractor
from laserramp.geometry import extract_point, is_shape_closed, path_length
from laserramp.overlap import extend_overlap
from laserramp.ramp import PaceRamper

DEFAULT_CHUNK_SIZE = 64 * 1024
OPEN_SHAPE_NOTE = "; overlap is skipped for non-closed shape\n"


def read_chunks(handle, chunk_size):
    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            return
        yield chunk


# -----------------------------------------------------------------------------#
# Main laser ramp processor class.
# -----------------------------------------------------------------------------
class LaserRampProcessor:
    def __init__(self, config):
        self.config = config
        self.ramper = PaceRamper(config)

        self.shape_count = 0
        self.closed_count = 0
        self.open_count = 0
        self.skipped_count = 0
        self.overlap_command_count = 0
        self.cut_length = 0.0

        logging.info(
            "Ramp settings (start pace=%s, increment=%s, step=%.3f mm); overlap=%.3f mm; closure tolerance=%s",
            config.start_pace,
            config.pace_increment,
            config.pace_distance,
            config.overlap_distance,
            config.closure_tolerance,
        )

    # -------------------------------------------------------------------------#
    # Rewrite the cutting block of one shape.
    # -------------------------------------------------------------------------#
    def process_shape(self, shape):
        start_point = shape.start_point
        if start_point is None:
            logging.warning(
                "Traversal without XY point, shape left untouched: %s",
                shape.traversal.strip(),
            )
            self.skipped_count += 1
            return shape.text

        self.shape_count += 1
        commands = normalize_commands(shape.commands)
        points = [p for p in map(extract_point, commands) if p is not None]
        end_point = points[-1] if points else None
        self.cut_length += path_length([start_point] + points)

        output = shape.preamble + shape.traversal + shape.preparation + "\n"

        if not is_shape_closed(end_point, start_point, self.config.closure_tolerance):
            self.open_count += 1
            logging.debug(
                "Shape %d is open (%d commands, pace F%d)",
                self.shape_count,
                len(commands),
                shape.pace,
            )
            commands = self.ramper.ramp(start_point, commands, shape.pace)
            return output + "\n".join(commands) + OPEN_SHAPE_NOTE + shape.stop

        self.closed_count += 1
        overlap_commands = extend_overlap(commands, self.config.overlap_distance)
        # The leading comment is not a move.
        self.overlap_command_count += len(overlap_commands) - 1
        logging.debug(
            "Shape %d is closed (%d commands, pace F%d), %d overlap commands",
            self.shape_count,
            len(commands),
            shape.pace,
            len(overlap_commands) - 1,
        )
        commands = self.ramper.ramp(
            start_point, commands + overlap_commands, shape.pace
        )
        return output + "\n".join(commands) + "\n" + shape.stop

    # -------------------------------------------------------------------------#
    # Stream chunks of G-code through the shape scanner.
    # -------------------------------------------------------------------------#
    def process_chunks(self, chunks):
        extractor = ShapeExtractor()
        for chunk in chunks:
            extractor.feed(chunk)
            while True:
                shape = extractor.extract()
                if shape is None:
                    break
                yield self.process_shape(shape)
            passthrough = extractor.drain()
            if passthrough:
                yield passthrough
        rest = extractor.finish()
        if rest:
            yield rest

    def process_text(self, text):
        return "".join(self.process_chunks([text]))

    # -------------------------------------------------------------------------#
    # Log summary statistics for the run.
    # -------------------------------------------------------------------------#
    def log_summary_stats(self):
        logging.info(
            "Summary: Shapes=%d (closed=%d, open=%d), Skipped=%d, Fractures=%d, Overlap commands=%d, Cut length=%.3f mm",
            self.shape_count,
            self.closed_count,
            self.open_count,
            self.skipped_count,
            self.ramper.fracture_count,
            self.overlap_command_count,
            self.cut_length,
        )

    # -------------------------------------------------------------------------#
    # Process the entire G-code file.
    # -------------------------------------------------------------------------#
    def process_file(self, input_path, output_path, chunk_size=DEFAULT_CHUNK_SIZE):
        if os.path.abspath(input_path) == os.path.abspath(output_path):
            raise ValueError("Output file must differ from the input file.")
        # read(0) returns "" and would end the stream before any input.
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be at least 1 character, got {chunk_size}.")
        try:
            with open(
                input_path, "r", encoding="utf-8", errors="surrogateescape", newline=""
            ) as infile, open(
                output_path, "w", encoding="utf-8", errors="surrogateescape", newline=""
            ) as outfile:
                logging.info("Opened file: %s", input_path)
                for text in self.process_chunks(read_chunks(infile, chunk_size)):
                    outfile.write(text)
        except OSError as e:
            logging.error("Error processing G-code file: %s", e)
            raise
        logging.info("Processed G-code file written to: %s", output_path)
        self.log_summary_stats()
        return self.shape_count
