"""Tests for laserramp.processor: shape rewriting, streaming and file handling."""

import pytest

from laserramp.config import RampConfig
from laserramp.processor import LaserRampProcessor

SQUARE = (
    "G90\n"
    "G0 X0 Y0\n"
    "M3 S1000\n"
    "G1 X0 Y0 F500\n"
    "G1 X10 Y0\n"
    "G1 X10 Y10\n"
    "G1 X0 Y10\n"
    "G1 X0 Y0\n"
    "M5 S0\n"
    "M2\n"
)

OPEN_LINE = "G0 X0 Y0\nG1 X0 Y0 F500\nG1 X3 Y0\nG1 X3 Y0\nM5 S0\n"


@pytest.fixture()
def config() -> RampConfig:
    return RampConfig(
        start_pace=300, pace_increment=100, pace_distance=5, overlap_distance=5
    )


@pytest.fixture()
def processor(config: RampConfig) -> LaserRampProcessor:
    return LaserRampProcessor(config)


# ---------------------------------------------------------------------------
# Shape rewriting
# ---------------------------------------------------------------------------


class TestClosedShape:
    def test_full_output(self, processor: LaserRampProcessor) -> None:
        assert processor.process_text(SQUARE) == (
            "G90\n"
            "G0 X0 Y0\n"
            "M3 S1000\n"
            "\n"
            "G1 X0.00 Y0.00 F300\n"
            "G1 X5.00 Y0.00 F400 ; fractured by 0.5000\n"
            "G1 X10.00 Y0.00 F400\n"
            "G1 X10.00 Y0.00 F500 ; fractured by 0.0000\n"
            "G1 X10 Y10\n"
            "G1 X0 Y10\n"
            "G1 X0 Y0\n"
            " ; Added 2 commands\n"
            "G1 X0 Y0\n"
            "G1 X5.00 Y0.00 ; Interpolated as 0.50 of last line (0 x 0 --> 10 x 0)\n"
            "M5 S0\n"
            "M2\n"
        )

    def test_counters(self, processor: LaserRampProcessor) -> None:
        processor.process_text(SQUARE + SQUARE)
        assert processor.shape_count == 2
        assert processor.closed_count == 2
        assert processor.open_count == 0
        assert processor.overlap_command_count == 4
        assert processor.ramper.fracture_count == 4
        assert processor.cut_length == pytest.approx(80.0)

    def test_ramp_covers_overlap_tail(self) -> None:
        slow = LaserRampProcessor(
            RampConfig(start_pace=100, pace_increment=10, pace_distance=5)
        )
        lines = slow.process_text(SQUARE).splitlines()
        # Eight 5 mm steps over the square, the overlap tail rewritten at F180.
        assert " ; Added 2 commands" in lines
        assert lines[-3] == "G1 X5.00 Y0.00 F180"
        assert lines[-4] == "G1 X0.00 Y0.00 F180 ; fractured by 0.0000"
        assert not any("Interpolated" in line for line in lines)

    def test_slow_shape_keeps_its_own_feed(self, processor: LaserRampProcessor) -> None:
        lines = processor.process_text(SQUARE.replace("F500", "F200")).splitlines()
        # Start pace 300 is already above F200, so nothing is ramped.
        assert lines[4] == "G1 X0 Y0 F200"
        assert [line for line in lines if " F" in line] == ["G1 X0 Y0 F200"]


class TestOpenShape:
    def test_full_output(self, processor: LaserRampProcessor) -> None:
        assert processor.process_text(OPEN_LINE) == (
            "G0 X0 Y0\n"
            "\n"
            "G1 X0.00 Y0.00 F300\n"
            "G1 X3.00 Y0.00 F300; overlap is skipped for non-closed shape\n"
            "M5 S0\n"
        )
        assert processor.open_count == 1
        assert processor.overlap_command_count == 0

    def test_closure_tolerance(self) -> None:
        text = "G0 X0 Y0\nG1 X0 Y0 F500\nG1 X3 Y0\nG1 X0.001 Y0\nM5 S0\n"
        exact = LaserRampProcessor(RampConfig())
        assert "overlap is skipped" in exact.process_text(text)
        loose = LaserRampProcessor(RampConfig(closure_tolerance=0.01))
        out = loose.process_text(text)
        assert "overlap is skipped" not in out
        assert " ; Added" in out
        assert loose.closed_count == 1

    def test_trailing_comment_does_not_hide_closure(self, processor) -> None:
        text = "G0 X0 Y0\nG1 X0 Y0 F500\nG1 X3 Y0\nG1 X0 Y0\n; done\nM5 S0\n"
        processor.process_text(text)
        assert processor.closed_count == 1


# ---------------------------------------------------------------------------
# Pass-through
# ---------------------------------------------------------------------------


class TestPassThrough:
    @pytest.mark.parametrize(
        "text",
        [
            "",
            "G90\nG21\n; no shapes here\nM2\n",
            "G0 X0 Y0\nG1 X1 Y1 F500\nG1 X2 Y2\n",
            "G0 X0 Y0\r\nG1 X1 Y1\r\nM5 S0\r\n",
        ],
    )
    def test_no_shape_round_trip(self, processor: LaserRampProcessor, text: str) -> None:
        assert processor.process_text(text) == text
        assert processor.shape_count == 0

    def test_traversal_without_point_is_skipped(self, processor) -> None:
        text = "G0 X5\nG1 X5 Y5 F500\nG1 X9 Y9\nM5 S0\n"
        assert processor.process_text(text) == text
        assert processor.skipped_count == 1
        assert processor.shape_count == 0

    @pytest.mark.parametrize("size", [1, 4, 13, 64])
    def test_chunking_does_not_change_output(self, config, size: int) -> None:
        text = "; job\n" + SQUARE + OPEN_LINE + SQUARE + "; end\n"
        expected = LaserRampProcessor(config).process_text(text)
        chunks = [text[i : i + size] for i in range(0, len(text), size)]
        processor = LaserRampProcessor(config)
        assert "".join(processor.process_chunks(chunks)) == expected
        assert processor.shape_count == 3


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class TestProcessFile:
    def test_bytes_outside_shapes_preserved(self, processor, tmp_path) -> None:
        source = tmp_path / "job.gcode"
        target = tmp_path / "job-out.gcode"
        source.write_bytes(
            "; héllo\r\n".encode("utf-8")
            + b"G0 X0 Y0\r\nG1 X0 Y0 F500\r\nG1 X3 Y0\r\nM5 S0\r\n; \xff end\r\n"
        )

        count = processor.process_file(str(source), str(target), chunk_size=7)

        assert count == 1
        data = target.read_bytes()
        assert data.startswith("; héllo\r\nG0 X0 Y0\r\n\n".encode("utf-8"))
        assert data.endswith(b"M5 S0\r\n; \xff end\r\n")

    def test_same_path_rejected(self, processor, tmp_path) -> None:
        source = tmp_path / "job.gcode"
        source.write_text(SQUARE)
        with pytest.raises(ValueError):
            processor.process_file(str(source), str(source))
        assert source.read_text() == SQUARE

    def test_missing_input(self, processor, tmp_path) -> None:
        with pytest.raises(OSError):
            processor.process_file(
                str(tmp_path / "missing.gcode"), str(tmp_path / "out.gcode")
            )

    @pytest.mark.parametrize("size", [0, -1])
    def test_chunk_size_must_be_positive(self, processor, tmp_path, size: int) -> None:
        source = tmp_path / "job.gcode"
        target = tmp_path / "job-out.gcode"
        source.write_text(SQUARE)
        with pytest.raises(ValueError):
            processor.process_file(str(source), str(target), chunk_size=size)
        assert not target.exists()
