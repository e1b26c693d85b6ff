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
import re

RE_LINE_BREAKS = re.compile(r"[\n\r]+")


def split_commands(first_command, body):
    """Rebuild the cutting command list of a shape.

    The cut-start command loses its feed token during extraction, so it comes
    in separately and is put back in front of the body lines.
    """
    commands = [line for line in RE_LINE_BREAKS.split(body.strip()) if line]
    commands.insert(0, first_command.strip())
    return commands


def normalize_commands(commands):
    """Collapse runs of identical commands, keeping the first of each run."""
    kept = []
    for command in commands:
        if not kept or command != kept[-1]:
            kept.append(command)
    return kept
