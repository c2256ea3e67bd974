import os
import tempfile
import unittest

from framestosvg import config
from framestosvg.config import StyleOptions, Theme, WindowBar

MINIMAL_CONFIG = """[style]
width=1024
height=768
font_family=Monaco
window_bar=windows
margin=10
margin_fill=#ff0000
[theme]
foreground=#FFFFFF
red=#AA0000
"""
UPPERCASE_CONFIG = MINIMAL_CONFIG.replace('[style]', '[STYLE]').replace('[theme]', '[Theme]')
DASHES_CONFIG = MINIMAL_CONFIG.replace('font_family', 'font-family')


class TestConfig(unittest.TestCase):
    def test_read_config(self):
        test_cases = [
            ('Minimal config', MINIMAL_CONFIG),
            ('Uppercase sections', UPPERCASE_CONFIG),
            ('Dashes in option names', DASHES_CONFIG),
        ]
        for case, configuration in test_cases:
            with self.subTest(case=case):
                style, theme = config.read_config(configuration)
                self.assertEqual((style.width, style.height), (1024, 768))
                self.assertEqual(style.font_family, 'Monaco')
                self.assertIs(style.window_bar, WindowBar.WINDOWS)
                self.assertEqual(style.margin, 10)
                self.assertEqual(style.margin_fill, '#ff0000')
                # Missing values are taken from the defaults
                self.assertEqual(style.padding, StyleOptions().padding)
                self.assertEqual(theme.foreground, '#FFFFFF')
                self.assertEqual(theme.red, '#AA0000')
                self.assertEqual(theme.green, Theme().green)

    def test_read_config_empty(self):
        self.assertEqual(config.read_config(''), (StyleOptions(), Theme()))

    def test_read_config_no_window_bar(self):
        for name in ['none', '', 'NONE']:
            with self.subTest(case=name):
                style, _ = config.read_config('[style]\nwindow_bar={}\n'.format(name))
                self.assertIs(style.window_bar, WindowBar.NONE)
                self.assertEqual(style.bar_height, 0)

    def test_read_config_failure(self):
        failure_test_cases = [
            ('not an INI file', 'width=12'),
            ('unknown section', '[colors]\nred=#FF0000'),
            ('unknown style option', '[style]\ncolumns=80'),
            ('non integer width', '[style]\nwidth=large'),
            ('invalid margin color', '[style]\nmargin_fill=red'),
            ('unknown window bar', '[style]\nwindow_bar=gnome'),
            ('unknown theme color', '[theme]\norange=#FF8800'),
            ('invalid theme color', '[theme]\nred=#GG0000'),
        ]
        for case, configuration in failure_test_cases:
            with self.subTest(case=case):
                with self.assertRaises(config.ConfigError):
                    config.read_config(configuration)

    def test_load_config(self):
        fd, filename = tempfile.mkstemp(prefix='framestosvg_', suffix='.ini')
        with os.fdopen(fd, 'w') as config_file:
            config_file.write(MINIMAL_CONFIG)
        self.addCleanup(os.remove, filename)

        style, theme = config.load_config(filename)
        self.assertEqual(style.width, 1024)
        self.assertEqual(theme.red, '#AA0000')

        with self.assertRaises(config.ConfigError):
            config.load_config(filename + '.missing')

    def test_style_options(self):
        style = StyleOptions(width=640, height=480, padding=10, window_bar='darwin',
                             window_bar_size=24)
        self.assertIs(style.window_bar, WindowBar.DARWIN)
        self.assertEqual(style.inner_width, 620)
        self.assertEqual(style.inner_height, 480 - 24 - 20)

        no_bar = style._replace(window_bar=WindowBar.NONE)
        self.assertEqual(no_bar.inner_height, 460)

        # Padding and window bar larger than the window
        cramped = style._replace(width=30, height=40, padding=20)
        self.assertEqual(cramped.inner_width, 0)
        self.assertEqual(cramped.inner_height, 0)

    def test_window_bar(self):
        test_cases = [
            (None, WindowBar.NONE),
            ('', WindowBar.NONE),
            ('Darwin', WindowBar.DARWIN),
            (' filled ', WindowBar.FILLED),
            (WindowBar.OUTLINE, WindowBar.OUTLINE),
        ]
        for name, expected in test_cases:
            with self.subTest(case=name):
                self.assertIs(config.window_bar(name), expected)

    def test_is_color(self):
        for color in ['#000000', '#abcDEF']:
            self.assertTrue(Theme.is_color(color))
        for color in [None, 'red', '#12345', '#1234567', '#GGGGGG']:
            self.assertFalse(Theme.is_color(color))
