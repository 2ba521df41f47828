"""Media source tests for stream selection and single-close lifecycle."""
import subprocess
import sys
import unittest
from fractions import Fraction
from types import SimpleNamespace
from unittest import mock


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


def _codec_context(width=640, height=480, pix_fmt="yuv420p", sar=Fraction(1, 1)):
    context = mock.MagicMock()
    context.width = width
    context.height = height
    context.pix_fmt = pix_fmt
    context.sample_aspect_ratio = sar
    context.name = "h264"
    return context


def _container(stream):
    container = mock.MagicMock()
    container.streams.best.return_value = stream
    return container


def _stream(context, index=0, time_base=Fraction(1, 25)):
    return SimpleNamespace(index=index, codec_context=context, time_base=time_base)


@unittest.skipUnless(AV_AVAILABLE, "PyAV unavailable in test environment")
class MediaSourceTests(unittest.TestCase):
    """Validate open/probe/select/decoder failures and cleanup."""

    def setUp(self):
        from frameplay.services import errors, media_source

        self.errors = errors
        self.media_source = media_source

    def _open_with(self, container):
        with mock.patch.object(self.media_source.av, "open", return_value=container) as open_mock:
            source = self.media_source.open_source("clip.mp4")
        open_mock.assert_called_once()
        return source

    def test_descriptor_from_best_stream(self):
        context = _codec_context(sar=Fraction(16, 15))
        container = _container(_stream(context, index=2))
        source = self._open_with(container)
        container.streams.best.assert_called_once_with("video")
        context.open.assert_called_once_with(strict=False)
        self.assertEqual(
            source.descriptor,
            self.media_source.VideoStreamDescriptor(
                index=2,
                width=640,
                height=480,
                pixel_format="yuv420p",
                sample_aspect_ratio=(16, 15),
                time_base=(1, 25),
                codec_name="h264",
            ),
        )

    def test_missing_sample_aspect_ratio_is_unknown(self):
        source = self._open_with(_container(_stream(_codec_context(sar=None))))
        self.assertEqual(source.descriptor.sample_aspect_ratio, (0, 1))

    def test_open_failure_raises_open_error(self):
        with mock.patch.object(self.media_source.av, "open", side_effect=FileNotFoundError(2, "No such file")):
            with self.assertRaises(self.errors.OpenError) as ctx:
                self.media_source.open_source("missing.mp4")
        self.assertIn("missing.mp4", str(ctx.exception))

    def test_no_video_stream_closes_container(self):
        container = _container(None)
        with self.assertRaises(self.errors.NoVideoStreamError):
            self._open_with(container)
        container.close.assert_called_once()

    def test_unprobed_stream_raises_probe_error(self):
        container = _container(_stream(_codec_context(width=0, height=0)))
        with self.assertRaises(self.errors.ProbeError):
            self._open_with(container)
        container.close.assert_called_once()

    def test_missing_pixel_format_raises_probe_error(self):
        container = _container(_stream(_codec_context(pix_fmt=None)))
        with self.assertRaises(self.errors.ProbeError):
            self._open_with(container)

    def test_decoder_open_failure(self):
        context = _codec_context()
        context.open.side_effect = ValueError("unsupported codec")
        container = _container(_stream(context))
        with self.assertRaises(self.errors.DecoderInitError):
            self._open_with(container)
        container.close.assert_called_once()

    def test_missing_decoder(self):
        container = _container(_stream(None))
        with self.assertRaises(self.errors.DecoderInitError):
            self._open_with(container)

    def test_close_is_idempotent(self):
        container = _container(_stream(_codec_context()))
        source = self._open_with(container)
        source.close()
        source.close()
        container.close.assert_called_once()
        self.assertTrue(source.decoder.closed)

    def test_read_packet_returns_none_at_end(self):
        container = _container(_stream(_codec_context()))
        packet = SimpleNamespace(stream_index=0)
        container.demux.return_value = iter([packet])
        source = self._open_with(container)
        self.assertIs(source.read_packet(), packet)
        self.assertIsNone(source.read_packet())

    def test_read_packet_wraps_demux_errors(self):
        container = _container(_stream(_codec_context()))

        def broken_demux(_stream):
            raise self.media_source.av.error.FFmpegError(-5, "I/O error")
            yield  # pragma: no cover

        container.demux.side_effect = broken_demux
        source = self._open_with(container)
        with self.assertRaises(self.errors.ReadError):
            source.read_packet()

    def test_decoder_returns_empty_list_when_drained(self):
        context = _codec_context()
        context.decode.side_effect = EOFError()
        decoder = self.media_source.VideoDecoder(context)
        self.assertEqual(decoder.decode(None), [])

    def test_decoder_wraps_ffmpeg_errors(self):
        context = _codec_context()
        context.decode.side_effect = self.media_source.av.error.FFmpegError(-1094995529, "Invalid data")
        decoder = self.media_source.VideoDecoder(context)
        with self.assertRaises(self.errors.DecodeError):
            decoder.decode(SimpleNamespace())


if __name__ == "__main__":
    unittest.main()
