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
import logging

from laserramp.geometry import (
    distance,
    extract_point,
    format_number,
    interpolate_point,
    line_to_point,
)


def extend_overlap(commands, overlap_distance):
    """
    Build the re-cut block appended to a closed shape.

    Whole commands are copied from the start of the path while their running
    length stays below ``overlap_distance``. The segment that crosses the
    threshold is cut at the exact distance and contributes one interpolated
    move. The block opens with a comment giving the number of commands added.

    Args:
        commands: Normalized cutting commands of a closed shape.
        overlap_distance: Length of path to cut a second time.

    Returns:
        List of commands to append after the original ones.
    """
    overlap_commands = []
    overlap_length = 0.0
    previous = None
    crossing = None

    for command in commands:
        point = extract_point(command)
        if point is None:
            overlap_commands.append(command)
            continue
        if previous is None:
            overlap_commands.append(command)
            previous = point
            continue

        segment = distance(previous, point)
        overlap_length += segment
        if overlap_length >= overlap_distance:
            crossing = (previous, point, segment)
            break
        overlap_commands.append(command)
        logging.debug("Overlap takes whole command: %s", command)
        previous = point

    if crossing is not None and len(commands) > 2 and crossing[2] > 0:
        start, end, segment = crossing
        fracture = min(1.0, 1.0 - (overlap_length - overlap_distance) / segment)
        fracture = max(0.0, fracture)
        point = interpolate_point(start, end, fracture)
        logging.debug("Interpolated overlap point: %s, %s", point.x, point.y)
        overlap_commands.append(
            f"{line_to_point(point)} ; Interpolated as {fracture:.2f} of last line "
            f"({format_number(start.x)} x {format_number(start.y)} --> "
            f"{format_number(end.x)} x {format_number(end.y)})"
        )

    logging.debug("Overlap adds %d commands", len(overlap_commands))
    overlap_commands.insert(0, f" ; Added {len(overlap_commands)} commands")
    return overlap_commands
