"""Patch Text Parser.

Compiles a patch text into a CompiledOutput in one forward pass.

Line kinds, by first character:
- ``@``  tags: ``@enabled``/``@disabled [heap|ams]``, ``@flag ...``, ``@stop``,
         legacy ``@nsobid <id>``
- ``#``  echo line, written to the diagnostics
- ``[``  AMS cheat header ``[name]``
- ``/``  comment, remembered as the name/author of the next patch
- anything else: patch content, ``<hex offset> <hex bytes...>`` or
  ``<hex offset> "string"``

Structural errors abort the whole parse and yield an empty output; lines
that do not look like patch content are skipped with a warning.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Dict, Iterable, Optional

from ..exceptions import (
    HexValueError,
    InvalidBuildIdError,
    MissingBuildIdError,
    OffsetRangeError,
    OffsetShiftError,
    PatchTextError,
    UnterminatedStringError,
)
from .diagnostics import DiagnosticSink, Diagnostics
from .meta_scanner import (
    META_TAGS,
    NSOBID_TAG,
    STOP_PARSING_TAG,
    PatchTextSource,
    read_source_lines,
    scan_meta,
)
from .models import (
    CompiledOutput,
    Patch,
    PatchCollection,
    PatchContent,
    PatchType,
    TargetType,
)
from .text_utils import (
    decode_escapes,
    decode_hex_bytes,
    find_string_close,
    first_token,
    is_hex_string,
    ltrim,
    parse_c_integer,
    split_name_author,
    split_tokens,
    strip_comment,
    trim,
    trim_leading_zeros,
)

ENABLED_TAG = "@enabled"
DISABLED_TAG = "@disabled"
FLAG_TAG = "@flag"

PATCH_TYPES = {
    "bin": PatchType.BINARY,
    "heap": PatchType.HEAP,
    "ams": PatchType.CHEAT,
}

BIG_ENDIAN_FLAG = "be"
LITTLE_ENDIAN_FLAG = "le"
NSOBID_FLAG = "nsobid"
NROBID_FLAG = "nrobid"
OFFSET_SHIFT_FLAG = "offset_shift"
DEBUG_INFO_FLAG = "debug_info"
ALT_DEBUG_INFO_FLAG = "print_values"  # legacy

MAX_OFFSET_DIGITS = 8
INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1


class ParserState(Enum):
    """Where the parser is between patch directives."""

    IDLE = auto()  # no content lines accepted
    ACCEPTING_PATCH = auto()  # content lines go into the current patch
    STOPPED = auto()  # @stop reached


class PatchTextParser:
    """Single-pass patch text compiler.

    One instance can be reused; every call to :meth:`parse` starts from a
    clean state.
    """

    def __init__(self, sink: Optional[DiagnosticSink] = None):
        self.diag = Diagnostics(sink)
        self._reset()

    def _reset(self) -> None:
        self.state = ParserState.IDLE
        self.line_num = 0
        self.line = ""
        self.last_comment = ""
        self.patch: Optional[Patch] = None
        self.collection: Optional[PatchCollection] = None
        self.sealed: Dict[str, PatchCollection] = {}
        self.offset_shift = 0
        self.big_endian = False
        self.verbose = False

    def parse(self, lines: Iterable[str], raise_on_error: bool = False) -> CompiledOutput:
        """Compile the patch text given as lines.

        Args:
            lines: Lines of the patch text, line terminators optional;
                iterators are read into a list first
            raise_on_error: Re-raise fatal errors instead of returning an empty output

        Returns:
            CompiledOutput, empty if a fatal error was found
        """
        lines = list(lines)
        meta = scan_meta(lines, self.diag.sink)
        self._reset()

        try:
            for self.line_num, raw_line in enumerate(lines, start=1):
                self._process_line(raw_line)
                if self.state is ParserState.STOPPED:
                    break
            else:
                self.diag.info("done parsing patches")
            self._finish()
        except PatchTextError as exc:
            self.diag.error(str(exc), exc.line_num or None)
            self._reset()
            if raise_on_error:
                raise
            return CompiledOutput()

        output = CompiledOutput(meta=meta, collections=list(self.sealed.values()))
        self._reset()
        return output

    # ------------------------------------------------------------------
    # Line dispatch
    # ------------------------------------------------------------------

    def _process_line(self, raw_line: str) -> None:
        line = trim(raw_line)
        self.line = line
        code, comment = strip_comment(line)
        lead = line[:1]

        if lead == "@":
            self._handle_tag(code)
        elif lead == "#":
            self.diag.info(line, self.line_num)
        elif lead == "[":
            self._start_cheat(code)
        elif lead == "/":
            self.last_comment = comment
        else:
            self._handle_content(code)

    def _handle_tag(self, code: str) -> None:
        raw_tag = first_token(code)
        tag = raw_tag.lower()
        rest = code[len(raw_tag):]

        if tag == STOP_PARSING_TAG:
            self.diag.info("done parsing patches (reached tag @stop)", self.line_num)
            self.state = ParserState.STOPPED
        elif tag in (ENABLED_TAG, DISABLED_TAG):
            self._start_patch(tag == ENABLED_TAG, rest.lower())
        elif tag == FLAG_TAG:
            self._handle_flag(rest)
        elif tag == NSOBID_TAG:
            build_id = trim(rest)
            if not build_id:
                raise InvalidBuildIdError(self.line_num, self.line)
            self._switch_collection(build_id, TargetType.SHARED_OBJECT)
        elif tag not in META_TAGS:
            self.diag.warning(f"ignored unrecognized tag: {tag}", self.line_num)

    def _handle_flag(self, rest: str) -> None:
        content = ltrim(rest)
        raw_flag = first_token(content)
        value = trim(content[len(raw_flag):])
        flag = raw_flag.lower()

        if flag == BIG_ENDIAN_FLAG:
            self.big_endian = True
        elif flag == LITTLE_ENDIAN_FLAG:
            self.big_endian = False
        elif flag in (NSOBID_FLAG, NROBID_FLAG):
            target_type = TargetType.EXECUTABLE if flag == NROBID_FLAG else TargetType.SHARED_OBJECT
            self._switch_collection(value, target_type)
        elif flag == OFFSET_SHIFT_FLAG:
            try:
                shift = parse_c_integer(value)
            except ValueError:
                raise OffsetShiftError(value, self.line_num, self.line) from None
            if not INT32_MIN <= shift <= INT32_MAX:
                raise OffsetShiftError(value, self.line_num, self.line)
            self.offset_shift = shift
            if self.verbose:
                self.diag.info(f"offset shift is now {shift}", self.line_num)
        elif flag in (DEBUG_INFO_FLAG, ALT_DEBUG_INFO_FLAG):
            self.verbose = True
            self.diag.info("additional debug info enabled", self.line_num)
        else:
            self.diag.warning(f"ignored unrecognized flag type: {flag}", self.line_num)

    # ------------------------------------------------------------------
    # Patches and collections
    # ------------------------------------------------------------------

    def _require_build_id(self) -> None:
        if self.collection is None or not self.collection.build_id:
            raise MissingBuildIdError(self.line_num, self.line)

    def _start_patch(self, enabled: bool, rest_lower: str) -> None:
        self._require_build_id()
        pending = self.patch
        self._seal_patch()

        patch = Patch(enabled=enabled, source_line=self.line_num)
        default_type = PatchType.BINARY
        if pending is not None and pending.type is PatchType.CHEAT and not pending.contents:
            # an empty [cheat] header hands its name and type to the directive
            patch.name, patch.author = pending.name, pending.author
            default_type = PatchType.CHEAT
        else:
            patch.name, patch.author = split_name_author(self.last_comment)
        patch.type = PATCH_TYPES.get(first_token(ltrim(rest_lower)), default_type)

        self.patch = patch
        self.state = ParserState.ACCEPTING_PATCH
        if self.verbose:
            self.diag.info(f"parsing patch: {patch.name}", self.line_num)

    def _start_cheat(self, code: str) -> None:
        self._require_build_id()
        self._seal_patch()

        close = code.rfind("]")
        name = code[1:close] if close > 0 else code[1:]
        self.patch = Patch(
            name=trim(name),
            type=PatchType.CHEAT,
            enabled=True,
            source_line=self.line_num,
        )
        if self.verbose:
            self.diag.info(f"parsing AMS cheat: {self.patch.name}", self.line_num)

    def _seal_patch(self) -> None:
        patch = self.patch
        self.patch = None
        if patch is None or not patch.contents:
            return
        self.collection.patches.append(patch)
        self.diag.info(f"patch read: {patch.name}", self.line_num)

    def _seal_collection(self, status: str = "stopped") -> None:
        collection = self.collection
        self.collection = None
        if collection is None or not collection.patches:
            return
        self.sealed[collection.build_id] = collection
        if self.verbose:
            self.diag.info(f"parsing {status} for {collection.build_id}", self.line_num)

    def _switch_collection(self, build_id: str, target_type: TargetType) -> None:
        self._seal_patch()
        self._seal_collection()

        existing = self.sealed.pop(build_id, None)
        if existing is not None:
            self.collection = existing
        else:
            self.collection = PatchCollection(build_id=build_id, target_type=target_type)

        # a new build id needs a fresh @enabled/@disabled before content
        self.state = ParserState.IDLE
        if self.verbose:
            self.diag.info(f"parsing started for {build_id}", self.line_num)

    def _finish(self) -> None:
        self._seal_patch()
        self._seal_collection("completed")

    # ------------------------------------------------------------------
    # Content lines
    # ------------------------------------------------------------------

    def _handle_content(self, code: str) -> None:
        if self.state is not ParserState.ACCEPTING_PATCH or not self.line:
            return

        if self.patch.type is PatchType.CHEAT:
            self.patch.contents.append(PatchContent(0, code.encode("utf-8")))
            if self.verbose:
                self.diag.info(f"AMS cheat: {code}", self.line_num)
            return

        raw_offset = first_token(code)
        offset_token = raw_offset.lower()
        if not offset_token or not is_hex_string(offset_token):
            self.diag.warning(f"line ignored: invalid offset: {self.line}", self.line_num)
            return

        digits = trim_leading_zeros(offset_token)
        if len(digits) > MAX_OFFSET_DIGITS:
            raise OffsetRangeError(digits, self.line_num, self.line)
        offset = (int(digits, 16) + self.offset_shift) & 0xFFFFFFFF

        value_region = ltrim(code[len(raw_offset):])
        if value_region.startswith('"'):
            value = self._parse_string_value(value_region)
        else:
            value = self._parse_hex_value(value_region)

        self.patch.contents.append(PatchContent(offset, value))
        if self.verbose:
            self.diag.info(
                f"offset: {offset:08x} value: {value.hex()} len: {len(value)}",
                self.line_num,
            )

    def _parse_string_value(self, value_region: str) -> bytes:
        close = find_string_close(value_region)
        if close < 0:
            raise UnterminatedStringError(value_region, self.line_num, self.line)
        text = decode_escapes(value_region[1:close])
        return text.encode("utf-8") + b"\x00"

    def _parse_hex_value(self, value_region: str) -> bytes:
        value = bytearray()
        for token in split_tokens(value_region):
            if len(token) % 2 != 0:
                raise HexValueError("bad length for hex values", token, self.line_num, self.line)
            if not is_hex_string(token):
                raise HexValueError("not valid hex values", token, self.line_num, self.line)
            value += decode_hex_bytes(token, self.big_endian)
        return bytes(value)


def parse_pchtxt(
    source: PatchTextSource,
    sink: Optional[DiagnosticSink] = None,
    *,
    raise_on_error: bool = False,
) -> CompiledOutput:
    """Compile a patch text.

    Args:
        source: Patch text as a string, a text stream or an iterable of lines
        sink: Receives diagnostic events (defaults to the ``pchtxt.patching`` logger)
        raise_on_error: Re-raise fatal PatchTextError instead of returning an empty output

    Returns:
        CompiledOutput with the metadata and one collection per build id
    """
    parser = PatchTextParser(sink)
    return parser.parse(read_source_lines(source), raise_on_error=raise_on_error)
