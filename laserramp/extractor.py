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
"""
Incremental shape scanner for laser G-code.

A shape is laid out as::

    <preamble> G0 <coords> <preparation> G1 <coords> F<pace> <commands> M5 S0 <rest>

The scanner walks the buffer in three steps ("traversal", "cut", "stop") and
remembers where it stopped, so new chunks only cost a scan of the new text.
While a shape is open, chunks are held aside and only joined onto the buffer
once they may complete its stop marker.
Any token touching the end of the buffer is treated as unfinished: the
scanner waits for more input instead of guessing.
"""
import re
import logging
from dataclasses import dataclass

from laserramp.commands import split_commands
from laserramp.geometry import extract_point

RAPID_PREFIX = "G0"
CUT_PREFIX = "G1"
STOP_PREFIX = "M5"
STOP_PARAMETER = "S0"

RE_COORD_RUN = re.compile(r"[XY0-9.\s\-]+")
RE_FEED_DIGITS = re.compile(r"[0-9]+")
RE_STOP_GAP = re.compile(r"\s+")


@dataclass
class ShapeMatch:
    """Text spans of one shape, in file order."""

    preamble: str
    traversal: str
    preparation: str
    first_command: str
    feed: str
    body: str
    stop: str
    pace: int

    @property
    def text(self):
        return (
            self.preamble
            + self.traversal
            + self.preparation
            + self.first_command
            + self.feed
            + self.body
            + self.stop
        )

    @property
    def start_point(self):
        return extract_point(self.traversal)

    @property
    def commands(self):
        return split_commands(self.first_command, self.body)


class ShapeExtractor:
    def __init__(self):
        self.buffer = ""
        # Chunks fed since the last scan, joined onto buffer only when needed.
        self.pending = []
        self._reset_scan()

    def _reset_scan(self):
        self.state = "traversal"
        # Earliest index a token of the current state may start at.
        self.resume = 0
        self.traversal_span = None
        self.cut_span = None
        # Unresolved end of the buffer while waiting for a stop marker.
        self.stop_window = ""
        self.stop_possible = False

    def feed(self, chunk):
        self.pending.append(chunk)
        if self.state == "stop" and not self.stop_possible:
            window = self.stop_window + chunk
            self.stop_possible = STOP_PREFIX in window
            self.stop_window = window[-(len(STOP_PREFIX) - 1) :]

    def _merge(self):
        if self.pending:
            self.buffer += "".join(self.pending)
            self.pending = []

    # -------------------------------------------------------------------------#
    # Public scanning API.
    # -------------------------------------------------------------------------#
    def extract(self):
        """Return the next complete ShapeMatch, or None if more input is needed."""
        if self.state == "stop" and not self.stop_possible:
            return None
        self._merge()
        if self.state == "traversal" and not self._scan_traversal():
            return None
        if self.state == "cut" and not self._scan_cut():
            return None
        shape = self._scan_stop()
        if shape is None:
            self.stop_window = self.buffer[self.resume :]
            self.stop_possible = False
        return shape

    def drain(self):
        """Release text that can no longer be part of a shape.

        Only text ahead of any rapid move qualifies; once a traversal has been
        seen everything is held until its shape completes.
        """
        if self.state != "traversal" or self.resume == 0:
            return ""
        released = self.buffer[: self.resume]
        self.buffer = self.buffer[self.resume :]
        self.resume = 0
        return released

    def finish(self):
        """End of input: hand back whatever is left, untouched."""
        self._merge()
        rest = self.buffer
        self.buffer = ""
        self._reset_scan()
        return rest

    # -------------------------------------------------------------------------#
    # Scan states.
    # -------------------------------------------------------------------------#
    def _scan_traversal(self):
        buf = self.buffer
        pos = self.resume
        while True:
            start = buf.find(RAPID_PREFIX, pos)
            if start < 0:
                # A trailing "G" may still become "G0".
                self.resume = max(pos, len(buf) - len(RAPID_PREFIX) + 1)
                return False
            run = RE_COORD_RUN.match(buf, start + len(RAPID_PREFIX))
            if run is None:
                if start + len(RAPID_PREFIX) >= len(buf):
                    self.resume = start
                    return False
                pos = start + 1
                continue
            if run.end() >= len(buf):
                self.resume = start
                return False
            self.traversal_span = (start, run.end())
            self.state = "cut"
            self.resume = run.end()
            logging.debug("Traversal found at offset %d", start)
            return True

    def _scan_cut(self):
        buf = self.buffer
        pos = self.resume
        while True:
            start = buf.find(CUT_PREFIX, pos)
            if start < 0:
                self.resume = max(pos, len(buf) - len(CUT_PREFIX) + 1)
                return False
            run = RE_COORD_RUN.match(buf, start + len(CUT_PREFIX))
            if run is None:
                if start + len(CUT_PREFIX) >= len(buf):
                    self.resume = start
                    return False
                pos = start + 1
                continue
            feed_start = run.end()
            if feed_start >= len(buf):
                self.resume = start
                return False
            if buf[feed_start] != "F":
                # Coordinate runs hold no "G", so the next candidate is past it.
                pos = feed_start
                continue
            digits = RE_FEED_DIGITS.match(buf, feed_start + 1)
            if digits is None:
                if feed_start + 1 >= len(buf):
                    self.resume = start
                    return False
                pos = feed_start + 1
                continue
            if digits.end() >= len(buf):
                self.resume = start
                return False
            self.cut_span = (start, feed_start, digits.end())
            self.state = "stop"
            self.resume = digits.end()
            return True

    def _scan_stop(self):
        buf = self.buffer
        pos = self.resume
        while True:
            start = buf.find(STOP_PREFIX, pos)
            if start < 0:
                self.resume = max(pos, len(buf) - len(STOP_PREFIX) + 1)
                return None
            gap = RE_STOP_GAP.match(buf, start + len(STOP_PREFIX))
            if gap is None:
                if start + len(STOP_PREFIX) >= len(buf):
                    self.resume = start
                    return None
                pos = start + 1
                continue
            tail = buf[gap.end() : gap.end() + len(STOP_PARAMETER)]
            if tail == STOP_PARAMETER:
                return self._complete(start, gap.end() + len(STOP_PARAMETER))
            if STOP_PARAMETER.startswith(tail) and gap.end() + len(tail) >= len(buf):
                self.resume = start
                return None
            pos = start + 1

    def _complete(self, stop_start, stop_end):
        buf = self.buffer
        traversal_start, traversal_end = self.traversal_span
        cut_start, feed_start, feed_end = self.cut_span
        shape = ShapeMatch(
            preamble=buf[:traversal_start],
            traversal=buf[traversal_start:traversal_end],
            preparation=buf[traversal_end:cut_start],
            first_command=buf[cut_start:feed_start],
            feed=buf[feed_start:feed_end],
            body=buf[feed_end:stop_start],
            stop=buf[stop_start:stop_end],
            pace=int(buf[feed_start + 1 : feed_end]),
        )
        self.buffer = buf[stop_end:]
        self._reset_scan()
        return shape


def extract_shape(text):
    """Find the first shape in a complete text.

    Returns ``(shape, remainder)`` or None when the text holds no shape.
    """
    extractor = ShapeExtractor()
    extractor.feed(text)
    shape = extractor.extract()
    if shape is None:
        return None
    return shape, extractor.buffer
