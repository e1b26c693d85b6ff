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
"""Point extraction and plane geometry for XY laser moves."""
import re
import logging
from collections import namedtuple

import numpy as np
from shapely.geometry import LineString, Point as ShapelyPoint

# Only the first X..Y pair of a line is considered.
RE_POINT = re.compile(r"X([\d.\-]+)\s+Y([\d.\-]+)")

Point = namedtuple("Point", ["x", "y"])


def extract_point(text):
    """Return the first ``X<n> Y<n>`` pair of a command, or None."""
    m = RE_POINT.search(text.strip())
    if not m:
        return None
    try:
        return Point(float(m.group(1)), float(m.group(2)))
    except ValueError:
        logging.debug("Malformed coordinates ignored: %s", text.strip())
        return None


def distance(p1, p2):
    return float(np.sqrt((p2.x - p1.x) ** 2 + (p2.y - p1.y) ** 2))


def interpolate_point(p1, p2, fracture):
    """Point at ``fracture`` along p1 -> p2.

    The weighted form keeps both ends exact: 0 returns p1 and 1 returns p2.
    ``fracture`` is not clamped.
    """
    return Point(
        (1 - fracture) * p1.x + fracture * p2.x,
        (1 - fracture) * p1.y + fracture * p2.y,
    )


def is_shape_closed(end_point, start_point, tolerance=0.0):
    if end_point is None or start_point is None:
        return False
    return ShapelyPoint(end_point).equals_exact(ShapelyPoint(start_point), tolerance)


def path_length(points):
    if len(points) < 2:
        return 0.0
    return LineString(points).length


def format_number(value):
    """Print integral values without a trailing ``.0``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def line_to_point(point):
    # Adding 0.0 turns -0.0 into 0.0 so it never prints as "-0.00".
    return f"G1 X{point.x + 0.0:.2f} Y{point.y + 0.0:.2f}"
