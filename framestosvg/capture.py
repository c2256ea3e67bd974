"""Frame capture from terminal session recordings

The output of a recorded session is fed to a pyte screen and a Frame is
captured each time enough time has elapsed since the previous one.
"""

import logging
from typing import Iterator

import pyte

from framestosvg.asciicast import AsciiCastEvent, AsciiCastHeader
from framestosvg.frames import Frame

logger = logging.getLogger(__name__)

# Default size for a character cell in pixels
CELL_WIDTH = 8
CELL_HEIGHT = 17


def _group_by_time(events, min_frame_dur=1, max_frame_dur=None):
    """Merge output events together if they are close enough

    The time elapsed between two consecutive events returned by this function
    is guaranteed to be at least `min_frame_dur`. Pauses longer than
    `max_frame_dur` are shortened to this value.

    :param events: Sequence of AsciiCastEvent
    :param min_frame_dur: Minimum time between two events in milliseconds
    :param max_frame_dur: Maximum time between two events in milliseconds, or
    None for no limit
    :return: Generator of tuples (time in seconds, data)
    """
    current_data = ''
    current_time = 0
    dropped_time = 0

    max_pause = max_frame_dur / 1000 if max_frame_dur else None

    for event in events:
        if event.event_type != 'o':
            continue

        time_between_events = event.time - (current_time + dropped_time)
        if time_between_events * 1000 >= min_frame_dur:
            if max_pause is not None and max_pause < time_between_events:
                dropped_time += time_between_events - max_pause
                time_between_events = max_pause
            yield current_time, current_data
            current_data = ''
            current_time += time_between_events

        current_data += event.event_data

    yield current_time, current_data


def replay(records, min_frame_dur=1, max_frame_dur=None, cell_width=CELL_WIDTH,
           cell_height=CELL_HEIGHT):
    """Return a tuple made of the geometry of the screen and the list of Frame
    captured while replaying asciicast records

    :param records: Header followed by events, in asciicast v2 format
    :param min_frame_dur: Minimum duration of a frame in milliseconds
    :param max_frame_dur: Maximum duration of a frame in milliseconds (None to
    use the idle time limit of the recording, if any)
    :param cell_width: Width of a character cell in pixels
    :param cell_height: Height of a character cell in pixels
    """
    if not isinstance(records, Iterator):
        records = iter(records)

    header = next(records)
    assert isinstance(header, AsciiCastHeader)

    if not max_frame_dur and header.idle_time_limit:
        max_frame_dur = int(header.idle_time_limit * 1000)

    screen = pyte.Screen(header.width, header.height)
    stream = pyte.Stream(screen)

    frames = []
    events = (record for record in records if isinstance(record, AsciiCastEvent))
    for time, data in _group_by_time(events, min_frame_dur, max_frame_dur):
        stream.feed(data)
        frames.append(_screen_frame(screen, time, cell_width, cell_height))

    logger.debug('Captured %d frames from a %dx%d screen', len(frames),
                 header.width, header.height)
    return (header.width, header.height), frames


def _screen_frame(screen, time, cell_width, cell_height):
    cursor = screen.cursor
    # A hidden cursor is placed outside of the screen so that it is not drawn
    cursor_y = -1 if cursor.hidden else cursor.y
    return Frame(lines=screen.display,
                 cursor_x=cursor.x,
                 cursor_y=cursor_y,
                 cursor_pixel_x=float(cursor.x * cell_width),
                 cursor_pixel_y=float(cursor_y * cell_height),
                 timestamp=time,
                 char_width=float(cell_width),
                 char_height=float(cell_height))
