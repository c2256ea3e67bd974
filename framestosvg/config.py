"""Style and theme configuration

The renderer never reads global state: a `StyleOptions` and a `Theme` are
built here (from defaults, or from an INI file) and handed to the generator.
"""

import configparser
import enum
from collections import namedtuple


class ConfigError(Exception):
    pass


class WindowBar(enum.Enum):
    """Variant of the title bar drawn above the terminal"""
    NONE = ''
    DARWIN = 'darwin'
    WINDOWS = 'windows'
    FILLED = 'filled'
    OUTLINE = 'outline'


_THEME_FIELDS = ['foreground', 'background', 'cursor', 'black', 'red', 'green',
                 'yellow', 'blue', 'magenta', 'cyan', 'white']
_Theme = namedtuple('_Theme', _THEME_FIELDS)
_Theme.__new__.__defaults__ = ('#d0d0d0', '#1e1e1e', '#d0d0d0', '#1c1c1c',
                               '#e05a4f', '#7ec16e', '#e6c35c', '#5c9ce6',
                               '#c678dd', '#56b6c2', '#dcdcdc')

# Names of the color classes emitted in the stylesheet, in output order
COLOR_NAMES = _THEME_FIELDS[3:]


class Theme(_Theme):
    """Terminal colors, all in '#rrggbb' format"""
    @staticmethod
    def is_color(color):
        if isinstance(color, str) and len(color) == 7 and color[0] == '#':
            try:
                int(color[1:], 16)
            except ValueError:
                return False
            return True
        return False


_STYLE_FIELDS = ['width', 'height', 'font_size', 'font_family', 'padding',
                 'margin', 'margin_fill', 'window_bar', 'window_bar_size',
                 'window_bar_color', 'background_color', 'border_radius']
_StyleOptions = namedtuple('_StyleOptions', _STYLE_FIELDS)
_StyleOptions.__new__.__defaults__ = (800, 600, 14, 'DejaVu Sans Mono', 20, 0,
                                      '#000000', WindowBar.DARWIN, 30,
                                      '#2d2d2d', '#1e1e1e', 8)


class StyleOptions(_StyleOptions):
    """Geometry of the rendered window

    width, height: size of the terminal window in pixels (margin excluded)
    padding: space between the window border and the text
    margin: space around the window, filled with margin_fill
    window_bar: WindowBar variant, WindowBar.NONE for no bar
    """
    def __new__(cls, *args, **kwargs):
        self = super().__new__(cls, *args, **kwargs)
        if not isinstance(self.window_bar, WindowBar):
            self = self._replace(window_bar=window_bar(self.window_bar))
        return self

    @property
    def bar_height(self):
        if window_bar(self.window_bar) is WindowBar.NONE:
            return 0
        return self.window_bar_size

    @property
    def inner_width(self):
        return max(self.width - 2 * self.padding, 0)

    @property
    def inner_height(self):
        return max(self.height - self.bar_height - 2 * self.padding, 0)


def window_bar(name):
    """Return the WindowBar variant called `name` (case insensitive)

    'none' is accepted as an alias for the empty variant.
    """
    if isinstance(name, WindowBar):
        return name
    if name is None:
        return WindowBar.NONE
    value = str(name).strip().lower()
    if value == 'none':
        value = ''
    try:
        return WindowBar(value)
    except ValueError as exc:
        raise ConfigError('Invalid window bar "{}" (expected one of {})'
                          .format(name, ', '.join(b.value or 'none' for b in WindowBar))) from exc


_INTEGER_OPTIONS = {'width', 'height', 'font_size', 'padding', 'margin',
                    'window_bar_size', 'border_radius'}
_COLOR_OPTIONS = {'margin_fill', 'window_bar_color', 'background_color'}


def _style_option(name, value):
    if name in _INTEGER_OPTIONS:
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigError('Option "{}" must be an integer: {}'.format(name, value)) from exc
    if name in _COLOR_OPTIONS:
        if not Theme.is_color(value):
            raise ConfigError('Invalid color for option "{}": {}'.format(name, value))
        return value
    if name == 'window_bar':
        return window_bar(value)
    return value


def conf_to_style(section, defaults=None):
    """Return StyleOptions with values of the INI section overriding defaults"""
    style = defaults if defaults is not None else StyleOptions()
    overrides = {}
    for key, value in section.items():
        name = key.lower().replace('-', '_')
        if name not in _STYLE_FIELDS:
            raise ConfigError('Unknown style option: "{}"'.format(key))
        overrides[name] = _style_option(name, value.strip())
    return style._replace(**overrides)


def conf_to_theme(section, defaults=None):
    """Return a Theme with colors of the INI section overriding defaults"""
    theme = defaults if defaults is not None else Theme()
    overrides = {}
    for key, value in section.items():
        name = key.lower()
        if name not in _THEME_FIELDS:
            raise ConfigError('Unknown theme color: "{}"'.format(key))
        value = value.strip()
        if not Theme.is_color(value):
            raise ConfigError('Invalid color for "{}": {}'.format(key, value))
        overrides[name] = value
    return theme._replace(**overrides)


def read_config(configuration):
    """Parse INI text and return a tuple (StyleOptions, Theme)

    Sections [style] and [theme] are both optional, section names are case
    insensitive and missing values are taken from the defaults.
    """
    parser = configparser.ConfigParser(default_section='__defaults__')
    try:
        parser.read_string(configuration)
    except configparser.Error as exc:
        raise ConfigError('Invalid configuration file') from exc

    sections = {name.lower(): name for name in parser.sections()}
    unknown = set(sections) - {'style', 'theme'}
    if unknown:
        raise ConfigError('Unknown section(s): {}'.format(', '.join(sorted(unknown))))

    style = StyleOptions()
    theme = Theme()
    if 'style' in sections:
        style = conf_to_style(parser[sections['style']], style)
    if 'theme' in sections:
        theme = conf_to_theme(parser[sections['theme']], theme)
    return style, theme


def load_config(filename):
    try:
        with open(filename, 'r') as config_file:
            return read_config(config_file.read())
    except OSError as exc:
        raise ConfigError('Cannot read configuration file "{}"'.format(filename)) from exc
