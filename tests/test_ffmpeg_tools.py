"""FFmpeg helper tests for filter descriptions and buffer arguments."""
import subprocess
import sys
import unittest
from types import SimpleNamespace
from unittest.mock import patch


def _module_importable(module: str) -> bool:
    """Return True when module can be imported in a subprocess."""
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return result.returncode == 0


AV_AVAILABLE = _module_importable("av")


@unittest.skipUnless(AV_AVAILABLE, "PyAV unavailable in test environment")
class FfmpegToolsTests(unittest.TestCase):
    """Validate filter description building, parsing and log wiring."""

    def setUp(self):
        from frameplay.services import ffmpeg_tools

        self.ffmpeg_tools = ffmpeg_tools

    def test_build_filter_description(self):
        plan = SimpleNamespace(target_width=80, target_height=30)
        self.assertEqual(self.ffmpeg_tools.build_filter_description(plan), "scale=80:30,format=gray")

    def test_build_buffer_args(self):
        descriptor = SimpleNamespace(
            width=640,
            height=480,
            pixel_format="yuv420p",
            time_base=(1, 25),
            sample_aspect_ratio=(1, 1),
        )
        self.assertEqual(
            self.ffmpeg_tools.build_buffer_args(descriptor),
            "video_size=640x480:pix_fmt=yuv420p:time_base=1/25:pixel_aspect=1/1",
        )

    def test_parse_filter_description(self):
        stages = self.ffmpeg_tools.parse_filter_description("scale=80:30, format=gray,null")
        self.assertEqual(stages, [("scale", "80:30"), ("format", "gray"), ("null", None)])
        self.assertEqual(self.ffmpeg_tools.output_format(stages), "gray")

    def test_parse_rejects_malformed_descriptions(self):
        from frameplay.services.errors import GraphParseError

        for description in ["", "   ", "scale=80:30,,format=gray", "=80:30", "scale=", "sc ale=1:1"]:
            with self.subTest(description=description):
                with self.assertRaises(GraphParseError):
                    self.ffmpeg_tools.parse_filter_description(description)

    def test_output_format_missing(self):
        self.assertIsNone(self.ffmpeg_tools.output_format([("scale", "80:30")]))
        self.assertEqual(self.ffmpeg_tools.output_format([("format", "gray|gray10le")]), "gray")

    @patch("frameplay.services.ffmpeg_tools.av.logging.set_level")
    def test_configure_ffmpeg_logging_levels(self, set_level_mock):
        av_logging = self.ffmpeg_tools.av.logging
        self.assertEqual(self.ffmpeg_tools.configure_ffmpeg_logging(False), av_logging.ERROR)
        self.assertEqual(self.ffmpeg_tools.configure_ffmpeg_logging(True), av_logging.VERBOSE)
        self.assertEqual(set_level_mock.call_count, 2)


if __name__ == "__main__":
    unittest.main()
