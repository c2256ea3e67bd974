"""Terminal frames, deduplication and animation timeline

This module exposes
    - `Frame`, a snapshot of the terminal screen as produced by a capture
    (see `framestosvg.capture` or `read_frames`)
    - `process_frames`, which collapses identical snapshots into a registry
    of unique `TerminalState` and builds the timeline mapping each frame to
    the state displayed at that point of the animation

Two frames map to the same state if their lines (once trailing spaces are
removed) and their cursor position are identical.
"""

import abc
import hashlib
import json
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)


class FrameError(Exception):
    pass


_FRAME_FIELDS = ['lines', 'cursor_x', 'cursor_y', 'cursor_pixel_x',
                 'cursor_pixel_y', 'timestamp', 'char_width', 'char_height',
                 'letter_spacing']
_Frame = namedtuple('_Frame', _FRAME_FIELDS)
_Frame.__new__.__defaults__ = (0, 0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


class Frame(_Frame):
    """Snapshot of the terminal screen

    lines: text of each row of the screen, in order
    cursor_x, cursor_y: column and row of the cursor
    cursor_pixel_x, cursor_pixel_y: position of the cursor in pixels
    timestamp: time of the capture in seconds
    char_width, char_height, letter_spacing: size of a character cell in
    pixels, identical for all frames of a capture
    """
    def __new__(cls, lines, *args, **kwargs):
        return super().__new__(cls, tuple(lines), *args, **kwargs)


_TerminalState = namedtuple('_TerminalState', ['lines', 'cursor_x', 'cursor_y',
                                               'cursor_pixel_x', 'cursor_pixel_y',
                                               'hash'])


class TerminalState(_TerminalState):
    """Unique screen content and cursor position"""
    @classmethod
    def from_frame(cls, frame):
        state = cls(frame.lines, frame.cursor_x, frame.cursor_y,
                    frame.cursor_pixel_x, frame.cursor_pixel_y, None)
        return state._replace(hash=hash_state(state))


def hash_state(state):
    """Return the hexadecimal MD5 digest of the content of `state`

    Trailing spaces of lines are ignored, the cursor position (both in cells
    and pixels, the latter rounded to two decimals) is part of the digest.
    """
    digest = hashlib.md5()
    for line in state.lines:
        digest.update(line.rstrip(' ').encode('utf-8'))
        digest.update(b'\n')
    digest.update('{:d},{:d},{:.2f},{:.2f}'.format(state.cursor_x,
                                                   state.cursor_y,
                                                   state.cursor_pixel_x,
                                                   state.cursor_pixel_y)
                  .encode('utf-8'))
    return digest.hexdigest()


KeyframeStop = namedtuple('KeyframeStop', ['percentage', 'state_index'])
KeyframeStop.__doc__ = 'Point of the timeline where a state is displayed'


class StateRegistry:
    """Unique terminal states in order of first occurrence"""
    def __init__(self):
        self.states = []
        self._indexes = {}

    def add(self, state):
        """Register `state` if its hash is new and return its index"""
        try:
            return self._indexes[state.hash]
        except KeyError:
            index = len(self.states)
            self.states.append(state)
            self._indexes[state.hash] = index
            return index

    def index(self, state_hash):
        return self._indexes[state_hash]

    def __contains__(self, state_hash):
        return state_hash in self._indexes

    def __getitem__(self, index):
        return self.states[index]

    def __iter__(self):
        return iter(self.states)

    def __len__(self):
        return len(self.states)


class StateCompactor(abc.ABC):
    """Second pass over the registry and timeline built by `process_frames`

    Subclasses may merge states (for example states differing by a few
    characters) as long as the timeline they return only references valid
    indexes of the registry they return.
    """
    @abc.abstractmethod
    def compact(self, registry, timeline):
        raise NotImplementedError


class NoCompaction(StateCompactor):
    def compact(self, registry, timeline):
        return registry, timeline


def _percentage(index, count):
    if count <= 1:
        return 0.0
    return index / (count - 1) * 100


def process_frames(frames, compactor=None):
    """Deduplicate frames and build the animation timeline

    :param frames: Sequence of Frame in capture order
    :param compactor: StateCompactor applied once deduplication is done
    :return: Tuple (StateRegistry, list of KeyframeStop), the timeline holding
    exactly one stop per frame
    """
    frames = list(frames)
    registry = StateRegistry()
    timeline = []
    for frame_count, frame in enumerate(frames):
        state = TerminalState.from_frame(frame)
        index = registry.add(state)
        timeline.append(KeyframeStop(_percentage(frame_count, len(frames)), index))

    logger.debug('%d frames, %d unique states', len(frames), len(registry))

    if compactor is None:
        compactor = NoCompaction()
    return compactor.compact(registry, timeline)


def animation_duration(frames, loop_delay=1000):
    """Return the duration of the animation in seconds

    The duration is the time elapsed between the first and the last frame
    plus `loop_delay` milliseconds, or 1 second if this is not positive.
    """
    if not frames:
        return 1.0
    duration = frames[-1].timestamp - frames[0].timestamp + loop_delay / 1000
    if duration <= 0:
        return 1.0
    return duration


def _frame_from_dict(frame_dict):
    if not isinstance(frame_dict, dict):
        raise FrameError('Invalid frame: expected an object, got {}'.format(frame_dict))
    unknown = set(frame_dict) - set(_FRAME_FIELDS)
    if unknown:
        raise FrameError('Unknown frame attribute(s): {}'.format(', '.join(sorted(unknown))))

    lines = frame_dict.get('lines')
    if not isinstance(lines, list) or not all(isinstance(line, str) for line in lines):
        raise FrameError('Invalid "lines" attribute: expected a list of strings')

    types = {
        'cursor_x': int,
        'cursor_y': int,
    }
    attributes = {}
    for name in _FRAME_FIELDS[1:]:
        if name not in frame_dict:
            continue
        value = frame_dict[name]
        expected = types.get(name, (int, float))
        if isinstance(value, bool) or not isinstance(value, expected):
            raise FrameError('Invalid type for attribute {}: {}'.format(name, type(value)))
        attributes[name] = value
    return Frame(lines, **attributes)


def read_frames(filename):
    """Return the list of frames stored in a JSON file

    The file holds a list of objects whose keys are the fields of Frame, only
    "lines" being mandatory. Raise FrameError if the file is invalid.
    """
    try:
        with open(filename, 'r') as frames_file:
            data = json.load(frames_file)
    except json.JSONDecodeError as exc:
        raise FrameError('Invalid JSON in frame file "{}"'.format(filename)) from exc

    if not isinstance(data, list):
        raise FrameError('Invalid frame file: expected a list of frames')
    return [_frame_from_dict(frame_dict) for frame_dict in data]
