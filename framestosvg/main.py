"""Command line interface of framestosvg"""

import argparse
import logging
import sys
import tempfile

import framestosvg.anim
import framestosvg.config
import framestosvg.frames
from framestosvg.asciicast import AsciiCastError

logger = logging.getLogger('framestosvg')

DEFAULT_LOOP_DELAY = 1000

USAGE = """framestosvg input_file [output_path] [-f FORMAT] [-c CONFIG] [-d DURATION]
                   [-D DELAY] [-m MIN_DURATION] [-M MAX_DURATION] [-b WINDOW_BAR]
                   [-v] [-h]

Render captured terminal frames or an asciicast recording as an SVG animation
"""


def integral_duration_validation(duration):
    if duration.lower().endswith('ms'):
        duration = duration[:-len('ms')]

    if duration.isdigit() and int(duration) >= 1:
        return int(duration)
    raise ValueError('duration must be an integer greater than 0')


def positive_seconds_validation(duration):
    if duration.lower().endswith('s'):
        duration = duration[:-len('s')]

    value = float(duration)
    if value <= 0:
        raise ValueError('duration must be greater than 0')
    return value


def window_bar_validation(name):
    try:
        return framestosvg.config.window_bar(name)
    except framestosvg.config.ConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse(args, default_loop_delay):
    """Parse command line arguments

    :param args: Arguments to parse
    :param default_loop_delay: Duration of the pause between two consecutive
    loops of the animation in milliseconds
    :return: argparse.Namespace
    """
    parser = argparse.ArgumentParser(prog='framestosvg', usage=USAGE)
    parser.add_argument(
        'input_file',
        help='frames captured from a terminal (JSON) or recording of a terminal '
             'session in asciicast v1 or v2 format'
    )
    parser.add_argument(
        'output_path',
        nargs='?',
        help='optional filename of the SVG animation. If missing, a random path '
             'will be automatically generated.',
        metavar='output_path'
    )
    parser.add_argument(
        '-f', '--format',
        choices=['asciicast', 'frames'],
        default='asciicast',
        help='format of input_file (default: asciicast)'
    )
    parser.add_argument(
        '-c', '--config',
        help='INI file with [style] and [theme] sections overriding the default '
             'geometry and colors',
        metavar='CONFIG'
    )
    parser.add_argument(
        '-d', '--duration',
        type=positive_seconds_validation,
        help='duration of one loop of the animation in seconds (default: time '
             'elapsed between the first and last frames plus the loop delay)',
        metavar='DURATION'
    )
    parser.add_argument(
        '-D', '--loop-delay',
        type=integral_duration_validation,
        metavar='DELAY',
        default=default_loop_delay,
        help=(('duration in milliseconds of the pause between two consecutive '
               'loops of the animation (default: {}ms)')
              .format(default_loop_delay))
    )
    parser.add_argument(
        '-m', '--min-frame-duration',
        type=integral_duration_validation,
        metavar='MIN_DURATION',
        default=1,
        help='minimum duration of a frame in milliseconds for asciicast input '
             '(default: 1ms)'
    )
    parser.add_argument(
        '-M', '--max-frame-duration',
        type=integral_duration_validation,
        metavar='MAX_DURATION',
        help='maximum duration of a frame in milliseconds for asciicast input '
             '(default: No maximum value)'
    )
    parser.add_argument(
        '-b', '--window-bar',
        type=window_bar_validation,
        metavar='WINDOW_BAR',
        help='title bar of the window: none, darwin, windows, filled or outline '
             '(overrides the configuration file)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='increase log messages verbosity'
    )
    return parser.parse_args(args)


def read_input(input_file, input_format, min_frame_duration, max_frame_duration):
    """Return the list of frames and the theme found in the input file, if any"""
    if input_format == 'frames':
        return framestosvg.frames.read_frames(input_file), None

    from framestosvg.asciicast import read_records
    from framestosvg.capture import replay

    records = read_records(input_file)
    header = records[0]
    _, frames = replay(records, min_frame_duration, max_frame_duration)
    theme = header.theme.to_theme() if header.theme is not None else None
    return frames, theme


def render_subcommand(args, output_path):
    """Render the animation of the input file"""
    if args.config is None:
        style, theme = framestosvg.config.StyleOptions(), None
    else:
        style, theme = framestosvg.config.load_config(args.config)
    if args.window_bar is not None:
        style = style._replace(window_bar=args.window_bar)

    logger.info('Rendering started')
    frames, recording_theme = read_input(args.input_file, args.format,
                                         args.min_frame_duration,
                                         args.max_frame_duration)
    if theme is None:
        theme = recording_theme

    duration = args.duration
    if duration is None:
        duration = framestosvg.frames.animation_duration(frames, args.loop_delay)

    framestosvg.anim.render_animation(frames, output_path, style, theme, duration)
    logger.info('Rendering ended, SVG animation is {}'.format(output_path))


def main(args=None):
    if args is None:
        args = sys.argv

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter('%(message)s')
    console_handler.setFormatter(console_formatter)
    logger.handlers = [console_handler]
    logger.setLevel(logging.INFO)

    args = parse(args[1:], DEFAULT_LOOP_DELAY)
    if args.verbose:
        console_handler.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)

    if args.output_path is None:
        _, output_path = tempfile.mkstemp(prefix='framestosvg_', suffix='.svg')
    else:
        output_path = args.output_path

    exit_status = 0
    try:
        render_subcommand(args, output_path)
    except (framestosvg.config.ConfigError, framestosvg.frames.FrameError,
            AsciiCastError, OSError) as exc:
        logger.error('Rendering failed: {}'.format(exc))
        exit_status = 1

    for handler in logger.handlers:
        handler.close()
    return exit_status
