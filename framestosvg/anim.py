"""SVG rendering of terminal frames

Unique terminal states are laid out side by side in a horizontal strip, each
state taking FRAME_SPACING units of the strip. A CSS animation slides the strip
so that the state matching the current point of the timeline is displayed
through the viewport of the terminal window. No script is involved.
"""

import logging
import os
import re

from lxml import etree
from wcwidth import wcswidth

from framestosvg.config import COLOR_NAMES, StyleOptions, Theme, WindowBar, window_bar
from framestosvg.frames import process_frames

logger = logging.getLogger(__name__)

SVG_NS = 'http://www.w3.org/2000/svg'

# Width of a terminal state in the coordinate system of the animation
FRAME_SPACING = 100.0

# Minimum number of ".yN" baseline classes in the stylesheet
BASELINE_CLASSES = 30

DEFAULT_FONT_SIZE = 20

# Character cell size relative to the font size when frames carry no metrics
CHAR_WIDTH_RATIO = 0.55
CHAR_HEIGHT_RATIO = 1.2

TITLE = 'Terminal'

_DARWIN_COLORS = ['#ff5f58', '#ffbd2e', '#18c132']
_CONTROL_COLOR = '#888'
_WINDOWS_CONTROL_COLOR = '#999'

_NON_SPACE_RUN = re.compile(r'[^ ]+')

# Characters outside of the Char production of XML 1.0
_INVALID_XML_CHARS = re.compile('[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')
_REPLACEMENT_CHAR = '\ufffd'


def _tag(name):
    return '{{{}}}{}'.format(SVG_NS, name)


def _sub_element(parent, name, attributes=None, text=None):
    element = etree.SubElement(parent, _tag(name), attributes or {})
    if text is not None:
        element.text = text
    return element


class SVGGenerator:
    """Render a sequence of Frame as a single animated SVG document

    :param frames: Sequence of Frame in capture order
    :param style: StyleOptions, defaults are used if None
    :param theme: Theme, defaults are used if None
    :param duration: Duration of one loop of the animation in seconds
    :param compactor: StateCompactor passed on to `process_frames`
    """
    def __init__(self, frames, style=None, theme=None, duration=1.0, compactor=None):
        self.frames = list(frames)
        self.style = style if style is not None else StyleOptions()
        self.theme = theme if theme is not None else Theme()
        self.duration = duration
        self.compactor = compactor

        self.font_size = self.style.font_size
        if self.font_size <= 0:
            self.font_size = DEFAULT_FONT_SIZE

        if self.frames and self.frames[0].char_width > 0:
            self.char_width = self.frames[0].char_width
            self.char_height = self.frames[0].char_height
        else:
            self.char_width = self.font_size * CHAR_WIDTH_RATIO
            self.char_height = self.font_size * CHAR_HEIGHT_RATIO

        self.registry = None
        self.timeline = None

    @property
    def scale(self):
        """Ratio between the animation coordinate system and screen pixels"""
        return FRAME_SPACING / max(self.style.inner_width, 1)

    def generate(self):
        """Return the SVG document as a string"""
        root = self.render()
        document = etree.tostring(root, encoding='unicode')
        logger.debug('SVG document: %d characters', len(document))
        return document

    def render(self):
        """Return the root element of the SVG document"""
        self.registry, self.timeline = process_frames(self.frames, self.compactor)

        style = self.style
        total_width, total_height = style.width, style.height
        if style.margin > 0:
            total_width += 2 * style.margin
            total_height += 2 * style.margin

        root = etree.Element(_tag('svg'), {
            'width': str(total_width),
            'height': str(total_height),
        }, nsmap={None: SVG_NS})

        window_parent = root
        if style.margin > 0:
            _sub_element(root, 'rect', {
                'width': str(total_width),
                'height': str(total_height),
                'fill': style.margin_fill or '#000000',
            })
            window_parent = _sub_element(root, 'g', {
                'transform': 'translate({0},{0})'.format(style.margin),
            })

        render_terminal_window(window_parent, style)

        viewbox_width = len(self.registry) * FRAME_SPACING
        viewbox_height = style.inner_height * self.scale
        screen = _sub_element(window_parent, 'svg', {
            'x': str(style.padding),
            'y': str(style.bar_height + style.padding),
            'width': str(style.inner_width),
            'height': str(style.inner_height),
            'viewBox': '0 0 {:.1f} {:.1f}'.format(viewbox_width, viewbox_height),
            'overflow': 'hidden',
        })

        style_element = _sub_element(screen, 'style')
        style_element.text = etree.CDATA(self.stylesheet())

        definitions = _sub_element(screen, 'defs')
        for symbol in self.symbols():
            definitions.append(symbol)

        container = _sub_element(screen, 'g', {'class': 'animation-container'})
        for index, state in enumerate(self.registry):
            container.append(render_state(index, state, self.char_width, self.scale))

        return root

    def _rows(self):
        rows = [len(state.lines) for state in self.registry]
        return max([BASELINE_CLASSES] + rows)

    def stylesheet(self):
        """Return the CSS rules of the animation

        Consecutive stops of the timeline displaying the same state, or sharing
        the same percentage, are collapsed into a single keyframe.
        """
        theme = self.theme
        css = ['@keyframes slide {']
        last_index = None
        last_percentage = None
        for stop in self.timeline:
            if stop.state_index != last_index and stop.percentage != last_percentage:
                offset = 0.0 - stop.state_index * FRAME_SPACING
                css.append('  {:.2f}% {{ transform: translateX({:.1f}px); }}'
                           .format(stop.percentage, offset))
                last_index = stop.state_index
                last_percentage = stop.percentage
        css.append('}')
        css.append('')

        css.append('.animation-container {')
        css.append('  animation: slide {:.2f}s steps(1, end) infinite;'.format(self.duration))
        css.append('}')
        css.append('')

        css.append('.f {{ fill: {}; font-family: {}, monospace; font-size: {:.2f}px; '
                   'white-space: pre; }}'
                   .format(theme.foreground, self.style.font_family, self.font_size))

        scale = self.scale
        for row in range(self._rows()):
            baseline = row * self.char_height * scale + self.char_height * scale * 0.8
            css.append('.y{} {{ y: {:.3f}; }}'.format(row, baseline))

        for name in COLOR_NAMES:
            css.append('.{} {{ fill: {}; }}'.format(name, getattr(theme, name)))

        css.append('@keyframes blink { 0%, 49% { opacity: 1; } 50%, 100% { opacity: 0; } }')
        css.append('.cursor {{ fill: {}; }}'.format(theme.cursor))
        css.append('')
        return os.linesep.join(css)

    def symbols(self):
        """Return the symbol elements shared by all states"""
        prompt = etree.Element(_tag('symbol'), {'id': 'prompt'})
        _sub_element(prompt, 'text', {'class': 'f'}, '>')

        prompt_echo = etree.Element(_tag('symbol'), {'id': 'prompt-echo'})
        _sub_element(prompt_echo, 'text', {'class': 'f'}, '> echo')

        cursor = etree.Element(_tag('symbol'), {'id': 'cursor-sym'})
        _sub_element(cursor, 'rect', {
            'class': 'cursor',
            'width': '{:.3f}'.format(self.char_width * self.scale),
            'height': '{:.3f}'.format(self.char_height * self.scale),
            'style': 'animation: blink 1s infinite',
        })
        return [prompt, prompt_echo, cursor]


def render_animation(frames, filename, style=None, theme=None, duration=1.0):
    generator = SVGGenerator(frames, style, theme, duration)
    with open(filename, 'w', encoding='utf-8') as output_file:
        output_file.write(generator.generate())


def _column(line, index):
    """Return the screen column of the character at `index` in `line`"""
    width = wcswidth(line[:index])
    return width if width >= 0 else index


def _xml_text(text):
    """Replace characters that cannot appear in an XML document"""
    return _INVALID_XML_CHARS.sub(_REPLACEMENT_CHAR, text)


def render_line(row, line, char_width, scale):
    """Return the element displaying `line` on row `row`, or None if blank

    Lines without leading spaces are rendered as a single text element, other
    lines as a text element with one tspan per run of non space characters.
    Control characters are displayed as U+FFFD. Markup characters are escaped
    by the serializer, which leaves quotes of text nodes as they are.
    """
    line = _xml_text(line).rstrip(' ')
    if not line.strip():
        return None

    row_class = 'y{}'.format(row)
    if not line.startswith(' ') and line.strip() == line:
        if line == '>':
            return etree.Element(_tag('use'), {
                'href': '#prompt',
                'x': '0',
                'class': row_class,
            })
        text = etree.Element(_tag('text'), {'x': '0', 'class': 'f ' + row_class})
        text.text = line
        return text

    text = etree.Element(_tag('text'), {'class': 'f ' + row_class})
    for match in _NON_SPACE_RUN.finditer(line):
        x = _column(line, match.start()) * char_width * scale
        _sub_element(text, 'tspan', {'x': '{:.3f}'.format(x)}, match.group())
    return text


def render_state(index, state, char_width, scale):
    """Return a group element displaying `state` at its place in the strip

    :param index: Index of the state in the registry
    :param state: TerminalState
    :param char_width: Width of a character cell in pixels
    :param scale: Ratio between animation units and pixels
    """
    group = etree.Element(_tag('g'), {
        'transform': 'translate({:.1f}, 0)'.format(index * FRAME_SPACING),
    })
    for row, line in enumerate(state.lines):
        element = render_line(row, line, char_width, scale)
        if element is not None:
            group.append(element)

    if 0 <= state.cursor_y < len(state.lines):
        _sub_element(group, 'use', {
            'href': '#cursor-sym',
            'x': '{:.3f}'.format(state.cursor_pixel_x * scale),
            'y': '{:.3f}'.format(state.cursor_pixel_y * scale),
        })
    return group


def render_terminal_window(parent, style):
    """Add the background of the window and its title bar to `parent`"""
    border_radius = max(style.border_radius, 0)
    _sub_element(parent, 'rect', {
        'width': str(style.width),
        'height': str(style.height),
        'rx': str(border_radius),
        'fill': style.background_color or '#1e1e1e',
    })

    bar = window_bar(style.window_bar)
    if bar is not WindowBar.NONE:
        render_window_bar(parent, style, bar)


def render_window_bar(parent, style, bar):
    width = style.width
    bar_size = style.window_bar_size
    radius = max(style.border_radius, 0)

    group = _sub_element(parent, 'g', {'id': 'window-bar'})
    path = ('M {r},0 L {wr},0 Q {w},0 {w},{r} L {w},{b} L 0,{b} L 0,{r} Q 0,0 {r},0 Z'
            .format(r=radius, wr=width - radius, w=width, b=bar_size))
    _sub_element(group, 'path', {
        'd': path,
        'fill': style.window_bar_color or '#2d2d2d',
    })

    _WINDOW_CONTROLS[bar](group, width, bar_size)

    _sub_element(group, 'text', {
        'x': str(width // 2),
        'y': str(bar_size // 2 + 4),
        'text-anchor': 'middle',
        'font-family': '{},monospace'.format(style.font_family),
        'font-size': '13',
        'fill': '#cccccc',
    }, TITLE)
    return group


def _darwin_controls(group, width, bar_size):
    for count, color in enumerate(_DARWIN_COLORS):
        _sub_element(group, 'circle', {
            'cx': str(20 + count * 20),
            'cy': str(bar_size // 2),
            'r': '6',
            'fill': color,
        })


def _windows_controls(group, width, bar_size):
    x = width - 20
    middle = bar_size // 2
    _sub_element(group, 'rect', {
        'x': str(x - 50),
        'y': str(middle - 1),
        'width': '14',
        'height': '2',
        'fill': _WINDOWS_CONTROL_COLOR,
    })
    _sub_element(group, 'rect', {
        'x': str(x - 30),
        'y': str(middle - 6),
        'width': '12',
        'height': '12',
        'fill': 'none',
        'stroke': _WINDOWS_CONTROL_COLOR,
        'stroke-width': '2',
    })
    _sub_element(group, 'path', {
        'd': 'M {},{} L {},{} M {},{} L {},{}'.format(x - 14, middle - 6, x - 2, middle + 6,
                                                      x - 2, middle - 6, x - 14, middle + 6),
        'stroke': _WINDOWS_CONTROL_COLOR,
        'stroke-width': '2',
    })


def _filled_controls(group, width, bar_size):
    for count in range(3):
        _sub_element(group, 'circle', {
            'cx': str(20 + count * 20),
            'cy': str(bar_size // 2),
            'r': '6',
            'fill': _CONTROL_COLOR,
        })


def _outline_controls(group, width, bar_size):
    for count in range(3):
        _sub_element(group, 'circle', {
            'cx': str(20 + count * 20),
            'cy': str(bar_size // 2),
            'r': '6',
            'fill': 'none',
            'stroke': _CONTROL_COLOR,
            'stroke-width': '1',
        })


_WINDOW_CONTROLS = {
    WindowBar.DARWIN: _darwin_controls,
    WindowBar.WINDOWS: _windows_controls,
    WindowBar.FILLED: _filled_controls,
    WindowBar.OUTLINE: _outline_controls,
}
