"""Command-line entry point: render the first video frame as ASCII art."""
import argparse
import logging
import sys

from frameplay.core.logging_setup import setup_logging
from frameplay.core.settings import PlayerConfig
from frameplay.services.errors import FramePlayError
from frameplay.services.player import play_first_frame

LOG = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser():
    parser = _ArgumentParser(
        prog="frameplay",
        description="Decode the first video frame of a media file and draw it as ASCII art.",
    )
    parser.add_argument("source", help="path or URL of the media source")
    parser.add_argument(
        "--max-columns",
        type=int,
        default=None,
        help="maximum characters per line (default: FRAMEPLAY_MAX_COLUMNS or 80)",
    )
    return parser


def main(argv=None, stdout=None):
    args = build_parser().parse_args(argv)

    config = PlayerConfig.from_env()
    if args.max_columns is not None:
        config = config.with_max_columns(args.max_columns)
    setup_logging(config)

    try:
        play_first_frame(args.source, config, stream=stdout)
    except FramePlayError as exc:
        LOG.info("[MAIN] run failed at %s: %s", exc.stage, exc)
        print(f"frameplay: {exc.stage}: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
