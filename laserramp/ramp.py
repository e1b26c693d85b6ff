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


class PaceRamper:
    def __init__(self, config):
        self.start_pace = config.start_pace
        self.pace_increment = config.pace_increment
        self.pace_distance = config.pace_distance
        # Running total over every shape ramped by this instance.
        self.fracture_count = 0

    # -------------------------------------------------------------------------#
    # Rewrite a command list so the feed climbs from start_pace to full_pace.
    # -------------------------------------------------------------------------#
    def ramp(self, start_point, commands, full_pace):
        """
        Args:
            start_point: Where the head sits before the first command.
            commands: Cutting commands, overlap block included for closed shapes.
            full_pace: Target feed of the shape.

        Returns:
            The rewritten command list. Commands reached after the pace hits
            ``full_pace`` are returned verbatim.
        """
        pace = self.start_pace
        position = start_point
        ramp_length = 0.0
        output = []

        for index, command in enumerate(commands):
            if pace >= full_pace:
                if index == 0:
                    # No feed emitted yet, the first move carries the shape's own.
                    return [f"{command} F{format_number(full_pace)}"] + commands[1:]
                return output + commands[index:]

            point = extract_point(command)
            if point is None:
                output.append(command)
                continue

            # Mid-segment: keep cutting it at ramp boundaries until what is
            # left fits in the current step.
            segment = distance(position, point)
            while segment > 0 and ramp_length + segment > self.pace_distance:
                fracture = (self.pace_distance - ramp_length) / segment
                position = interpolate_point(position, point, fracture)
                pace = min(pace + self.pace_increment, full_pace)
                output.append(
                    f"{line_to_point(position)} F{format_number(pace)} "
                    f"; fractured by {fracture:.4f}"
                )
                self.fracture_count += 1
                logging.debug("Segment fractured at %.4f, pace now %s", fracture, pace)
                ramp_length = 0.0
                if pace >= full_pace:
                    return output + commands[index:]
                segment = distance(position, point)

            # Command boundary: the rest of the segment fits in this step.
            ramp_length += segment
            output.append(f"{line_to_point(point)} F{format_number(pace)}")
            position = point
            logging.debug("Whole move at pace %s, ramp length %.4f", pace, ramp_length)

        return output


def ramp_pace(start_point, commands, full_pace, config):
    return PaceRamper(config).ramp(start_point, commands, full_pace)
