"""Trajectory file parser.

Grammar (whitespace, blank lines and ``%`` comments allowed between tokens)::

    stream      := { path }
    path        := "p" [beginlabel] point+ [endlabel] "q" [endlabel]
    beginlabel  := "b" anchor quotedtext
    endlabel    := "e" anchor quotedtext
    point       := s1 s2 s3 [ "t" [ "l" anchor quotedtext ] ]
    anchor      := top | ulft | lft | llft | bot | lrgt | rgt | urgt

Label text is delimited by double quotes and may not span lines. Parsing is a
single pass with one character of lookahead; the first error aborts.
"""

from __future__ import annotations

import io
import logging
import math
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TextIO, cast

from poincare_tools.errors import CapacityError, TrajectorySyntaxError
from poincare_tools.params import ANCHORS, Anchor
from poincare_tools.trajectory import Trajectory

logger = logging.getLogger(__name__)

_WORD_STOP = ' \t\r\n\f\v%"'
_COMPONENT_NAMES = ('S1', 'S2', 'S3')
# Plain decimal numbers only: no nan, inf, or digit separators
_NUMBER_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')


class _CharStream:
    """Character reader with one character of pushback and line counting."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._pushed: str | None = None
        self.line = 1

    def getc(self) -> str:
        """Next character, or '' at end of input."""
        if self._pushed is not None:
            ch, self._pushed = self._pushed, None
        else:
            ch = self._stream.read(1)
        if ch == '\n':
            self.line += 1
        return ch

    def ungetc(self, ch: str) -> None:
        if not ch:
            return
        if self._pushed is not None:
            raise RuntimeError('Only one character of pushback is supported')
        if ch == '\n':
            self.line -= 1
        self._pushed = ch

    def peek(self) -> str:
        ch = self.getc()
        self.ungetc(ch)
        return ch

    def skip_blanks_and_comments(self) -> None:
        """Skip whitespace and ``%`` comments up to the next token."""
        while True:
            ch = self.getc()
            if ch == '%':
                while ch not in ('\n', ''):
                    ch = self.getc()
            elif not ch or not ch.isspace():
                self.ungetc(ch)
                return

    def read_word(self) -> str:
        chars: list[str] = []
        ch = self.getc()
        while ch and ch not in _WORD_STOP:
            chars.append(ch)
            ch = self.getc()
        self.ungetc(ch)
        return ''.join(chars)


@dataclass
class ParserContext:
    """Explicit parse state threaded through the parser functions.

    Parameters:
        chars: Character stream being parsed.
        source: Input name used in error messages.
        path_line: Line where the current path started.
        count: Number of completed trajectories.
    """

    chars: _CharStream
    source: str = '<input>'
    path_line: int = 0
    count: int = 0
    trajectory: Trajectory = field(default_factory=Trajectory)

    def syntax_error(self, message: str) -> TrajectorySyntaxError:
        return TrajectorySyntaxError(message, self.chars.line, self.source)

    def capacity_error(self, err: CapacityError) -> CapacityError:
        return CapacityError(str(err), self.chars.line, self.source)


def _is_keyword_start(ch: str) -> bool:
    return ch.isalpha()


def _scan_quoted_text(ctx: ParserContext) -> str:
    chars = ctx.chars
    ch = chars.getc()
    while ch in (' ', '\t'):
        ch = chars.getc()
    if ch != '"':
        chars.ungetc(ch)
        raise ctx.syntax_error('Use enclosing quote marks (") around label text')
    text: list[str] = []
    ch = chars.getc()
    while ch != '"':
        if ch in ('\n', ''):
            chars.ungetc(ch)
            raise ctx.syntax_error('Reached end of line without closing quote mark in label')
        text.append(ch)
        ch = chars.getc()
    return ''.join(text)


def _scan_label(ctx: ParserContext) -> tuple[Anchor, str]:
    """Scan ``anchor "text"`` following a b/e/l keyword."""
    ctx.chars.skip_blanks_and_comments()
    word = ctx.chars.read_word()
    if word not in ANCHORS:
        raise ctx.syntax_error(f'Invalid label position {word!r}')
    text = _scan_quoted_text(ctx)
    logger.debug('Scanned label %r (%s) at line %d', text, word, ctx.chars.line)
    return cast(Anchor, word), text


def _scan_triplet(ctx: ParserContext) -> tuple[float, float, float]:
    values: list[float] = []
    for name in _COMPONENT_NAMES:
        ctx.chars.skip_blanks_and_comments()
        word = ctx.chars.read_word()
        if not word:
            raise ctx.syntax_error(f'Faulty {name}: expected a number, found end of token')
        if not _NUMBER_RE.fullmatch(word):
            raise ctx.syntax_error(f'Faulty {name}: {word!r} is not a number')
        value = float(word)
        if not math.isfinite(value):
            raise ctx.syntax_error(f'Faulty {name}: {word!r} is out of range')
        values.append(value)
    return (values[0], values[1], values[2])


def _scan_point(ctx: ParserContext) -> None:
    """Scan one triplet with its optional tick mark and tick label."""
    traj = ctx.trajectory
    s1, s2, s3 = _scan_triplet(ctx)
    try:
        traj.add_point(s1, s2, s3)
    except CapacityError as e:
        raise ctx.capacity_error(e) from e
    chars = ctx.chars
    chars.skip_blanks_and_comments()
    if chars.peek() != 't':
        return
    word = chars.read_word()
    if word != 't':
        raise ctx.syntax_error(f'Unexpected token {word!r}')
    try:
        traj.add_tick()
    except CapacityError as e:
        raise ctx.capacity_error(e) from e
    chars.skip_blanks_and_comments()
    if chars.peek() != 'l':
        return
    word = chars.read_word()
    if word != 'l':
        raise ctx.syntax_error(f'Unexpected token {word!r}')
    anchor, text = _scan_label(ctx)
    try:
        traj.add_label(text, anchor)
    except CapacityError as e:
        raise ctx.capacity_error(e) from e


def _scan_end_label(ctx: ParserContext) -> None:
    anchor, text = _scan_label(ctx)
    try:
        ctx.trajectory.set_end_label(text, anchor)
    except CapacityError as e:
        raise ctx.capacity_error(e) from e


def _scan_path(ctx: ParserContext) -> Trajectory:
    """Scan the body of a path after its opening ``p``."""
    chars = ctx.chars
    traj = ctx.trajectory
    chars.skip_blanks_and_comments()
    if chars.peek() == 'b':
        word = chars.read_word()
        if word != 'b':
            raise ctx.syntax_error(f'Unexpected token {word!r}')
        logger.debug('Begin-point label detected at line %d', chars.line)
        anchor, text = _scan_label(ctx)
        try:
            traj.set_begin_label(text, anchor)
        except CapacityError as e:
            raise ctx.capacity_error(e) from e
    logger.debug('Scanning Stokes trajectory starting at line %d', chars.line)
    while True:
        chars.skip_blanks_and_comments()
        ch = chars.peek()
        if not ch:
            raise TrajectorySyntaxError(
                'Unterminated path (missing q)', ctx.path_line, ctx.source
            )
        if not _is_keyword_start(ch):
            _scan_point(ctx)
            continue
        word = chars.read_word()
        if word == 'q':
            break
        if word == 'e':
            _scan_end_label(ctx)
            continue
        if word in ('t', 'l'):
            raise ctx.syntax_error(f"'{word}' must directly follow a Stokes triplet")
        raise ctx.syntax_error(f'Faulty S1: {word!r} is not a number')
    if not traj.points:
        raise ctx.syntax_error('Empty path: at least one Stokes triplet is required')
    logger.debug(
        'End of Stokes trajectory %d detected at line %d', ctx.count + 1, chars.line
    )
    chars.skip_blanks_and_comments()
    if chars.peek() == 'e':
        word = chars.read_word()
        if word != 'e':
            raise ctx.syntax_error(f'Unexpected token {word!r}')
        logger.debug('End-point label detected at line %d', chars.line)
        _scan_end_label(ctx)
    return traj


def iter_trajectories(stream: TextIO | str, source: str = '<input>') -> Iterator[Trajectory]:
    """Yield trajectories from a character stream, one per ``p ... q`` path.

    Parameters:
        stream: Text stream or the trajectory text itself.
        source: Name used in error messages.

    Raises:
        TrajectorySyntaxError: Malformed input (with 1-based line number).
        CapacityError: Too many points, ticks, or labels, or label text too long.
    """
    if isinstance(stream, str):
        stream = io.StringIO(stream)
    ctx = ParserContext(chars=_CharStream(stream), source=source)
    chars = ctx.chars
    while True:
        chars.skip_blanks_and_comments()
        if not chars.peek():
            break
        ctx.path_line = chars.line
        word = chars.read_word()
        if word != 'p':
            raise ctx.syntax_error(f"Expected 'p' to start a trajectory, found {word!r}")
        logger.debug('New trajectory detected at line %d', ctx.path_line)
        ctx.trajectory = Trajectory()
        traj = _scan_path(ctx)
        ctx.count += 1
        yield traj
    logger.debug('Parsed %d trajectories from %s', ctx.count, ctx.source)


def parse_trajectories(stream: TextIO | str, source: str = '<input>') -> list[Trajectory]:
    """Parse all trajectories from a stream (see ``iter_trajectories``)."""
    return list(iter_trajectories(stream, source))
