"""asciicast recordings

Decoding of terminal session recordings in asciicast v1 and v2 format, the
input of `framestosvg.capture`. The specification of both formats is
available here:
    [1] https://github.com/asciinema/asciinema/blob/develop/doc/asciicast-v1.md
    [2] https://github.com/asciinema/asciinema/blob/develop/doc/asciicast-v2.md
"""
import json
from collections import namedtuple
from typing import Iterable

from framestosvg.config import COLOR_NAMES, Theme


class AsciiCastError(Exception):
    pass


_AsciiCastTheme = namedtuple('AsciiCastTheme', ['fg', 'bg', 'palette'])


class AsciiCastTheme(_AsciiCastTheme):
    """Color theme stored in the header of a recording

    fg: default text color
    bg: default background color
    palette: colon separated list of 8 or 16 terminal colors, only the first
    8 are kept
    """
    def __new__(cls, fg, bg, palette):
        if not Theme.is_color(fg):
            raise AsciiCastError('Invalid foreground color: {}'.format(fg))
        if not Theme.is_color(bg):
            raise AsciiCastError('Invalid background color: {}'.format(bg))
        colors = palette.split(':') if isinstance(palette, str) else []
        if len(colors) < 8 or not all(Theme.is_color(c) for c in colors[:8]):
            raise AsciiCastError('Invalid palette: the first 8 colors must be valid')
        return super().__new__(cls, fg, bg, ':'.join(colors[:8]))

    def to_theme(self):
        colors = dict(zip(COLOR_NAMES, self.palette.split(':')))
        return Theme(foreground=self.fg, background=self.bg, cursor=self.fg, **colors)


_AsciiCastHeader = namedtuple('AsciiCastHeader', ['version', 'width', 'height', 'theme',
                                                  'idle_time_limit'])


class AsciiCastHeader(_AsciiCastHeader):
    """Header record

    version: Version of the asciicast file format
    width: Initial number of columns of the terminal
    height: Initial number of lines of the terminal
    theme: AsciiCastTheme or None
    idle_time_limit: Maximum duration of inactivity in seconds, or None
    """
    types = {
        'version': int,
        'width': int,
        'height': int,
        'theme': (type(None), AsciiCastTheme),
        'idle_time_limit': (type(None), int, float)
    }

    def __new__(cls, version, width, height, theme=None, idle_time_limit=None):
        self = super().__new__(cls, version, width, height, theme, idle_time_limit)
        for attr_name in cls._fields:
            attr = getattr(self, attr_name)
            if not isinstance(attr, cls.types[attr_name]):
                raise AsciiCastError('Invalid type for attribute {}: {} (expected one of {})'
                                     .format(attr_name, type(attr), cls.types[attr_name]))
        if version != 2:
            raise AsciiCastError('Only asciicast v2 headers are supported')
        return self

    @classmethod
    def from_json_dict(cls, json_dict):
        attributes = {attr: json_dict.get(attr) for attr in cls._fields}
        if isinstance(attributes['theme'], dict):
            try:
                attributes['theme'] = AsciiCastTheme(**attributes['theme'])
            except TypeError as exc:
                raise AsciiCastError('Invalid theme: {}'.format(attributes['theme'])) from exc
        return cls(**attributes)


_AsciiCastEvent = namedtuple('AsciiCastEvent', ['time', 'event_type', 'event_data'])


class AsciiCastEvent(_AsciiCastEvent):
    """Event record

    time: Time elapsed since the beginning of the recording in seconds
    event_type: 'o' for data written to the standard output of the terminal,
    'i' for data read from its standard input
    event_data: Data captured during the recording
    """
    types = {
        'time': (int, float),
        'event_type': (str,),
        'event_data': (str,),
    }

    def __new__(cls, time, event_type, event_data):
        self = super().__new__(cls, time, event_type, event_data)
        for attr_name in cls._fields:
            attr = getattr(self, attr_name)
            if isinstance(attr, bool) or not isinstance(attr, cls.types[attr_name]):
                raise AsciiCastError('Invalid type for attribute {}: {} (expected one of {})'
                                     .format(attr_name, type(attr), cls.types[attr_name]))
        return self


def parse_record(line):
    """Return the header or event encoded by a line of an asciicast v2 file"""
    try:
        json_value = json.loads(line)
    except json.JSONDecodeError as exc:
        raise AsciiCastError from exc

    if isinstance(json_value, dict):
        return AsciiCastHeader.from_json_dict(json_value)
    if isinstance(json_value, list):
        try:
            time, event_type, event_data = json_value
        except ValueError as exc:
            raise AsciiCastError('Invalid event: {}'.format(line)) from exc
        return AsciiCastEvent(time, event_type, event_data)

    truncated_line = line if len(line) < 20 else '{}...'.format(line[:20])
    raise AsciiCastError('Unknown record type: "{}"'.format(truncated_line))


def _read_v1_records(data):
    v1_header_attributes = {
        'version',
        'width',
        'height',
        'stdout'
    }
    try:
        json_dict = json.loads(data)
    except json.JSONDecodeError as exc:
        raise AsciiCastError from exc
    if not isinstance(json_dict, dict):
        raise AsciiCastError('Invalid asciicast v1 file')
    missing_attributes = v1_header_attributes - set(json_dict)
    if missing_attributes:
        raise AsciiCastError('Missing attributes in asciicast v1 file: {}'
                             .format(missing_attributes))

    if json_dict['version'] != 1:
        raise AsciiCastError('This function can only decode asciicast v1 data')

    yield AsciiCastHeader(2, json_dict['width'], json_dict['height'])

    if not isinstance(json_dict['stdout'], Iterable):
        raise AsciiCastError('Invalid type for stdout attribute (expected Iterable): {}'
                             .format(json_dict['stdout']))

    time = 0
    for event in json_dict['stdout']:
        try:
            time_elapsed, event_data = event
        except (TypeError, ValueError) as exc:
            raise AsciiCastError from exc

        if not isinstance(time_elapsed, (int, float)) or not isinstance(event_data, str):
            raise AsciiCastError('Invalid type for event: got object "{}" but expected '
                                 'type Tuple[Union[int, float], str]'.format(event))
        time += time_elapsed
        yield AsciiCastEvent(time, 'o', event_data)


def read_records(filename):
    """Return the records of the file as a list, header first

    The file may be in either asciicast v1 or v2 format. Records of v1 files
    are converted to their v2 equivalent.
    Raise AsciiCastError if a record is invalid"""
    with open(filename, 'r') as cast_file:
        data = cast_file.read()

    try:
        records = [parse_record(line) for line in data.splitlines() if line.strip()]
    except AsciiCastError:
        return list(_read_v1_records(data))

    if not records or not isinstance(records[0], AsciiCastHeader):
        raise AsciiCastError('Missing header in asciicast file "{}"'.format(filename))
    return records
