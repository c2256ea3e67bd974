import os
import tempfile
import unittest

from framestosvg.asciicast import AsciiCastEvent, AsciiCastHeader, AsciiCastTheme, \
                                  AsciiCastError, parse_record, read_records, _read_v1_records


def palette(n):
    return ':'.join(['#{:02x}0000'.format(i) for i in range(n)])


class TestAsciicast(unittest.TestCase):
    def test_AsciiCastTheme(self):
        failure_test_cases = [
            ('invalid foreground color', None, '#ABCDEF', palette(8)),
            ('invalid hex number', '#BCDEFG', '#ABCDEF', palette(8)),
            ('invalid background color', '#123456', None, palette(16)),
            ('invalid palette', '#123456', '#ABCDEF', None),
            ('incomplete palette', '#123456', '#ABCDEF', palette(7)),
        ]
        for case, fg, bg, colors in failure_test_cases:
            with self.subTest(case=case):
                with self.assertRaises(AsciiCastError):
                    AsciiCastTheme(fg, bg, colors)

        theme = AsciiCastTheme('#000000', '#AAAAAA', palette(16))
        self.assertEqual(theme.palette, palette(8))

    def test_to_theme(self):
        theme = AsciiCastTheme('#FFFFFF', '#000000', palette(8)).to_theme()
        self.assertEqual(theme.foreground, '#FFFFFF')
        self.assertEqual(theme.background, '#000000')
        self.assertEqual(theme.cursor, '#FFFFFF')
        self.assertEqual(theme.black, '#000000')
        self.assertEqual(theme.red, '#010000')
        self.assertEqual(theme.white, '#070000')

    cast_v2_lines = [
        # Header: Missing theme
        '{"version": 2, "width": 212, "height": 53}',
        # Header: 8 color theme
        '{"version": 2, "width": 212, "height": 53, "theme": {"fg": "#000000", "bg": "#AAAAAA", '
        '"palette": "#000000:#111111:#222222:#333333:#444444:#555555:#666666:#777777"}}',
        # Header: additional values
        '{"version": 2, "width": 212, "height": 53, "timestamp": 123456798123}',
        # Float idle time limit
        '{"version": 2, "width": 212, "height": 53, "idle_time_limit": 1.234}',
        # Event: Non printable characters
        '[0.010303, "o", "\\u001b[1;31mnico \\u001b[0;34m~\\u001b[0m"]',
        # Event: Unicode characters
        '[1.146397, "o", "❤ ☀ ☆ ☂ ☻ ♞ ☯ ☭ ☢ € →"]',
        # Event: time is an integer and not a float
        '[2, "o", "\\r\\n"]',
    ]

    color_theme_8 = AsciiCastTheme(fg='#000000', bg='#AAAAAA', palette='#000000:#111111:'
                                   '#222222:#333333:#444444:#555555:#666666:#777777')
    cast_v2_records = [
        AsciiCastHeader(2, 212, 53),
        AsciiCastHeader(2, 212, 53, color_theme_8),
        AsciiCastHeader(2, 212, 53),
        AsciiCastHeader(2, 212, 53, None, 1.234),
        AsciiCastEvent(0.010303, 'o', '\u001b[1;31mnico \u001b[0;34m~\u001b[0m'),
        AsciiCastEvent(1.146397, 'o', '❤ ☀ ☆ ☂ ☻ ♞ ☯ ☭ ☢ € →'),
        AsciiCastEvent(2, 'o', '\r\n'),
    ]

    def test_parse_record(self):
        for line, record in zip(self.cast_v2_lines, self.cast_v2_records):
            with self.subTest(case=line):
                self.assertEqual(parse_record(line), record)

    def test_parse_record_failure(self):
        failure_test_cases = [
            ('invalid JSON', '{"version": 2'),
            ('unknown record type', '42'),
            ('version 1 header', '{"version": 1, "width": 80, "height": 24}'),
            ('invalid width', '{"version": 2, "width": "80", "height": 24}'),
            ('incomplete event', '[1.0, "o"]'),
            ('invalid event time', '["1.0", "o", "data"]'),
        ]
        for case, line in failure_test_cases:
            with self.subTest(case=case):
                with self.assertRaises(AsciiCastError):
                    parse_record(line)

    def test__read_v1_records(self):
        data = ('{"version": 1, "width": 80, "height": 24, "stdout": '
                '[[0.5, "a"], [0.25, "b"]]}')
        header, event_1, event_2 = _read_v1_records(data)
        self.assertEqual(header, AsciiCastHeader(2, 80, 24))
        self.assertEqual(event_1, AsciiCastEvent(0.5, 'o', 'a'))
        self.assertEqual(event_2, AsciiCastEvent(0.75, 'o', 'b'))

        failure_test_cases = [
            ('missing stdout', '{"version": 1, "width": 80, "height": 24}'),
            ('wrong version', '{"version": 3, "width": 80, "height": 24, "stdout": []}'),
            ('invalid event', '{"version": 1, "width": 80, "height": 24, "stdout": [[1]]}'),
            ('not an object', '[]'),
        ]
        for case, data in failure_test_cases:
            with self.subTest(case=case):
                with self.assertRaises(AsciiCastError):
                    list(_read_v1_records(data))

    def _write(self, data):
        fd, filename = tempfile.mkstemp(prefix='framestosvg_', suffix='.cast')
        with os.fdopen(fd, 'w') as cast_file:
            cast_file.write(data)
        self.addCleanup(os.remove, filename)
        return filename

    def test_read_records(self):
        with self.subTest(case='v2'):
            filename = self._write('\n'.join(self.cast_v2_lines[:1] + self.cast_v2_lines[4:]))
            records = read_records(filename)
            self.assertEqual(records, self.cast_v2_records[:1] + self.cast_v2_records[4:])

        with self.subTest(case='v1'):
            filename = self._write('{\n"version": 1,\n"width": 80,\n"height": 24,\n'
                                   '"stdout": [[0.5, "a"]]\n}')
            records = read_records(filename)
            self.assertEqual(records, [AsciiCastHeader(2, 80, 24),
                                       AsciiCastEvent(0.5, 'o', 'a')])

        with self.subTest(case='missing header'):
            filename = self._write(self.cast_v2_lines[4])
            with self.assertRaises(AsciiCastError):
                read_records(filename)
