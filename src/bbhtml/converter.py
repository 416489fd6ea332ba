import logging
import re

from . import errors
from .constants import (
    ARGUMENT_TAGS,
    BARE_ARGUMENT_TAGS,
    CELL_TAGS,
    DATA_SPECIAL_CHARS,
    END_TAG_NAME_CHARS,
    HTML_ESCAPES,
    LIST_ITEM_TAG,
    LIST_TAGS,
    OPTION_TAGS,
    PREFORMATTED_TAGS,
    ROW_TAG,
    SIMPLE_TAGS,
    TABLE_TAG,
    TAG_ALIASES,
    TAG_NAME_CHARS,
    TAG_NAME_START_CHARS,
)
from .errors import ParseError, StrictModeError

logger = logging.getLogger(__name__)

_ASCII_LOWER_TABLE = str.maketrans({chr(code): chr(code + 32) for code in range(65, 91)})
_DATA_SPECIAL_PATTERN = re.compile(f"[{re.escape(DATA_SPECIAL_CHARS)}]")


class ConverterOpts:
    __slots__ = ("collect_errors", "debug", "discard_bom", "flush_partial_tags", "strict")

    def __init__(
        self,
        collect_errors=False,
        strict=False,
        flush_partial_tags=True,
        discard_bom=False,
        debug=False,
    ):
        self.strict = bool(strict)
        # Strict mode needs the error record to raise with.
        self.collect_errors = bool(collect_errors) or self.strict
        self.flush_partial_tags = bool(flush_partial_tags)
        self.discard_bom = bool(discard_bom)
        self.debug = bool(debug)

    def __repr__(self):
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.__slots__)
        return f"ConverterOpts({fields})"


class Converter:
    """Single-pass BBCode to HTML converter.

    A four-mode state machine walks the input once, left to right. Opening tags
    that pass their placement rules are pushed on ``stack`` and written out as
    HTML; closing tags pop back to their match. Anything that does not parse is
    written back as literal text, so conversion never fails on bad markup.
    """

    DEFAULT = 0
    TAG_OPEN = 1
    TAG_NAME = 2
    END_TAG_NAME = 3

    MODES = (DEFAULT, TAG_OPEN, TAG_NAME, END_TAG_NAME)

    __slots__ = (
        "buffer",
        "errors",
        "length",
        "name",
        "opts",
        "out",
        "pos",
        "stack",
        "state",
        "tag_start",
    )

    def __init__(self, opts=None):
        self.opts = opts or ConverterOpts()

        self.state = self.DEFAULT
        self.buffer = ""
        self.length = 0
        self.pos = 0
        # Offset of the "[" that began the tag being scanned
        self.tag_start = 0

        self.name = []
        self.stack = []
        self.out = []
        self.errors = []

    def run(self, text):
        """Convert ``text`` and return the HTML fragment."""
        if text and text[0] == "\ufeff" and self.opts.discard_bom:
            text = text[1:]

        self.buffer = text or ""
        self.length = len(self.buffer)
        self.pos = 0
        self.tag_start = 0
        self.state = self.DEFAULT
        self.name.clear()
        self.stack.clear()
        self.out.clear()
        self.errors = []

        while self.pos < self.length:
            self._step()

        self._finish()
        return "".join(self.out)

    def debug(self, message):
        if self.opts.debug:
            logger.debug("%s (pos=%d, stack=%s)", message, self.pos, self.stack)

    # ---------------------
    # Helper methods
    # ---------------------

    def _step(self):
        state = self.state
        if state == self.DEFAULT:
            self._state_default()
        elif state == self.TAG_OPEN:
            self._state_tag_open()
        elif state == self.TAG_NAME:
            self._state_tag_name()
        elif state == self.END_TAG_NAME:
            self._state_end_tag_name()
        else:
            raise AssertionError(f"bbhtml: reached invalid mode {state!r}")

    def _get_char(self):
        if self.pos >= self.length:
            return None
        c = self.buffer[self.pos]
        self.pos += 1
        return c

    def _canonical(self, raw_name):
        tag = raw_name.translate(_ASCII_LOWER_TABLE)
        return TAG_ALIASES.get(tag, tag)

    def _location(self, offset):
        buffer = self.buffer
        line = buffer.count("\n", 0, offset) + 1
        column = offset - (buffer.rfind("\n", 0, offset) + 1) + 1
        return line, column

    def _emit_error(self, code, message=None, offset=None):
        if not self.opts.collect_errors:
            return
        if offset is None:
            offset = self.tag_start
        line, column = self._location(offset)
        error = ParseError(code, line=line, column=column, message=message)
        self.errors.append(error)
        self.debug(f"error {error}")
        if self.opts.strict:
            raise StrictModeError(error)

    def _to_default(self):
        self.name.clear()
        self.state = self.DEFAULT

    def _unparse(self, prefix, terminator=""):
        """Write the scanned tag back as literal text and resume the default mode.

        The prefix and name go out verbatim, but ``terminator`` (the character
        that broke the tag) is HTML-escaped like plain text, so ``[<`` becomes
        ``[&lt;`` rather than the raw ``[<``. The output stays a safe fragment.
        """
        literal = prefix + "".join(self.name) + HTML_ESCAPES.get(terminator, terminator)
        self.out.append(literal)
        self.debug(f"unparsed {literal!r}")
        self._to_default()

    def _push(self, tag):
        self.stack.append(tag)
        self.out.append(f"<{tag}>")
        self.debug(f"opened <{tag}>")
        self._to_default()

    def _in_list(self):
        stack = self.stack
        return any(tag in stack for tag in LIST_TAGS)

    def _in_row(self):
        # The first table must enclose the first row.
        stack = self.stack
        if ROW_TAG not in stack or TABLE_TAG not in stack:
            return False
        return stack.index(TABLE_TAG) < stack.index(ROW_TAG)

    # ---------------------
    # Argument hooks
    # ---------------------

    # No argument grammar is implemented yet. Each hook reports whether it took
    # over the scan; returning False makes the caller degrade to literal text.

    def _open_without_argument(self, tag):
        """``[url]`` / ``[img]`` with no argument at all."""
        return False

    def _open_with_argument(self, tag):
        """``[tag=`` for link targets, colors and sizes."""
        return False

    def _open_with_options(self, tag):
        """``[tag `` for font and image display options."""
        return False

    # ---------------------
    # State handlers
    # ---------------------

    def _state_default(self):
        buffer = self.buffer
        pos = self.pos
        match = _DATA_SPECIAL_PATTERN.search(buffer, pos)
        if match is None:
            self.out.append(buffer[pos:])
            self.pos = self.length
            return
        end = match.start()
        if end > pos:
            self.out.append(buffer[pos:end])
        c = buffer[end]
        self.pos = end + 1
        if c == "[":
            self.tag_start = end
            self.state = self.TAG_OPEN
            return
        self.out.append(HTML_ESCAPES[c])

    def _state_tag_open(self):
        c = self._get_char()
        if c == "[":
            # "[[" is an escaped bracket
            self.out.append("[")
            self._to_default()
            return
        if c == "/":
            self.name.clear()
            self.state = self.END_TAG_NAME
            return
        if c in TAG_NAME_START_CHARS:
            self.name.clear()
            self.name.append(c)
            self.state = self.TAG_NAME
            return

        self._emit_error(
            errors.INVALID_FIRST_CHARACTER_OF_TAG_NAME,
            f"{c!r} cannot start a tag name",
            offset=self.pos - 1,
        )
        self._unparse("[", c)

    def _state_tag_name(self):
        while True:
            c = self._get_char()
            if c is None:
                # End of input; _finish() deals with the partial tag.
                return
            if c in TAG_NAME_CHARS:
                self.name.append(c)
                continue
            break

        raw_name = "".join(self.name)
        if c == "]":
            self._open_tag(raw_name)
        elif c == "=":
            tag = self._canonical(raw_name)
            if tag in ARGUMENT_TAGS and self._open_with_argument(tag):
                return
            self._reject_argument(tag, raw_name, "=")
        elif c == " ":
            tag = self._canonical(raw_name)
            if tag in OPTION_TAGS and self._open_with_options(tag):
                return
            self._reject_argument(tag, raw_name, " ")
        else:
            self._emit_error(
                errors.INVALID_CHARACTER_IN_TAG_NAME,
                f"{c!r} in tag name {raw_name!r}",
                offset=self.pos - 1,
            )
            self._unparse("[", c)

    def _open_tag(self, raw_name):
        tag = self._canonical(raw_name)

        if tag in SIMPLE_TAGS or tag in PREFORMATTED_TAGS:
            self._push(tag)
            return

        if tag == LIST_ITEM_TAG:
            allowed = self._in_list()
        elif tag == ROW_TAG:
            allowed = TABLE_TAG in self.stack
        elif tag in CELL_TAGS:
            allowed = self._in_row()
        elif tag in BARE_ARGUMENT_TAGS:
            if self._open_without_argument(tag):
                return
            self._emit_error(errors.UNSUPPORTED_TAG_ARGUMENT, f"[{raw_name}] needs an argument")
            self._unparse("[", "]")
            return
        else:
            self._emit_error(errors.UNKNOWN_TAG, f"unknown tag [{raw_name}]")
            self._unparse("[", "]")
            return

        if allowed:
            self._push(tag)
        else:
            self._emit_error(errors.MISPLACED_TAG, f"[{raw_name}] is not allowed here")
            self._unparse("[", "]")

    def _reject_argument(self, tag, raw_name, separator):
        if tag in ARGUMENT_TAGS or tag in OPTION_TAGS:
            self._emit_error(errors.UNSUPPORTED_TAG_ARGUMENT, f"arguments for [{raw_name}] are not supported")
        else:
            self._emit_error(errors.UNKNOWN_TAG, f"unknown tag [{raw_name}]")
        self._unparse("[", separator)

    def _state_end_tag_name(self):
        while True:
            c = self._get_char()
            if c is None:
                return
            if c in END_TAG_NAME_CHARS:
                self.name.append(c)
                continue
            break

        raw_name = "".join(self.name)
        if c != "]":
            self._emit_error(
                errors.INVALID_CHARACTER_IN_TAG_NAME,
                f"{c!r} in closing tag name {raw_name!r}",
                offset=self.pos - 1,
            )
            self._unparse("[/", c)
            return

        tag = self._canonical(raw_name)
        if tag not in self.stack:
            self._emit_error(errors.UNMATCHED_END_TAG, f"[/{raw_name}] closes nothing")
            self._unparse("[/", "]")
            return

        # Close everything opened after the target, innermost first.
        while True:
            popped = self.stack.pop()
            self.out.append(f"</{popped}>")
            if popped == tag:
                break
            self._emit_error(errors.MISNESTED_END_TAG, f"[/{raw_name}] also closed <{popped}>")
        self.debug(f"closed <{tag}>")
        self._to_default()

    def _finish(self):
        state = self.state
        if state != self.DEFAULT:
            if state == self.TAG_OPEN or state == self.TAG_NAME:
                prefix = "["
            elif state == self.END_TAG_NAME:
                prefix = "[/"
            else:
                raise AssertionError(f"bbhtml: reached invalid mode {state!r}")
            self._emit_error(errors.EOF_IN_TAG, "input ended inside a tag")
            if self.opts.flush_partial_tags:
                self._unparse(prefix)
            else:
                self._to_default()

        while self.stack:
            tag = self.stack.pop()
            self._emit_error(errors.UNCLOSED_TAG, f"<{tag}> closed at end of input", offset=self.length)
            self.out.append(f"</{tag}>")


def convert(text, opts=None, **options):
    """Convert BBCode ``text`` to an HTML fragment.

    Keyword options are the fields of `ConverterOpts`; pass either those or a
    ready ``opts`` object.
    """
    if opts is None:
        opts = ConverterOpts(**options)
    elif options:
        raise TypeError("convert() takes either opts or keyword options, not both")
    return Converter(opts).run(text)
