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
"""Ramp and overlap parameters shared by every stage of the processor."""
from dataclasses import dataclass

DEFAULT_OVERLAP = 5.0  # mm
DEFAULT_START_PACE = 300.0  # mm/min
DEFAULT_PACE_INCREMENT = 100.0  # mm/min
DEFAULT_PACE_DISTANCE_TENTHS = 10  # 0.1 mm units on the command line
DEFAULT_CLOSURE_TOLERANCE = 0.0  # exact match


@dataclass(frozen=True)
class RampConfig:
    """Immutable parameter set for one run.

    ``pace_distance`` is in machine units here; the command line takes it in
    tenths, see :meth:`from_cli`.
    """

    start_pace: float = DEFAULT_START_PACE
    pace_increment: float = DEFAULT_PACE_INCREMENT
    pace_distance: float = DEFAULT_PACE_DISTANCE_TENTHS / 10
    overlap_distance: float = DEFAULT_OVERLAP
    closure_tolerance: float = DEFAULT_CLOSURE_TOLERANCE

    def __post_init__(self):
        for name in ("start_pace", "pace_increment", "pace_distance", "overlap_distance"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive, got {value!r}")
        if not self.closure_tolerance >= 0:
            raise ValueError(
                f"closure_tolerance must not be negative, got {self.closure_tolerance!r}"
            )

    @classmethod
    def from_cli(
        cls,
        overlap=DEFAULT_OVERLAP,
        start_pace=DEFAULT_START_PACE,
        pace_increment=DEFAULT_PACE_INCREMENT,
        pace_distance_tenths=DEFAULT_PACE_DISTANCE_TENTHS,
        closure_tolerance=DEFAULT_CLOSURE_TOLERANCE,
    ):
        return cls(
            start_pace=start_pace,
            pace_increment=pace_increment,
            pace_distance=pace_distance_tenths / 10,
            overlap_distance=overlap,
            closure_tolerance=closure_tolerance,
        )
