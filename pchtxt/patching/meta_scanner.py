"""Metadata scanner for the leading block of a patch text.

The metadata block runs from the first line up to the first blank line
(or an ``@stop`` tag). It carries ``@title``, ``@program`` and ``@url``;
a ``#`` line is the legacy way of giving a title.
"""

from __future__ import annotations

import io
from typing import Iterable, List, Optional, Sequence, TextIO, Union

from .diagnostics import DiagnosticSink, Diagnostics
from .models import PatchTextMeta
from .text_utils import first_token, ltrim, strip_comment, trim

TITLE_TAG = "@title"
PROGRAM_ID_TAG = "@program"
URL_TAG = "@url"
NSOBID_TAG = "@nsobid"  # legacy
STOP_PARSING_TAG = "@stop"
META_TAGS = frozenset({TITLE_TAG, PROGRAM_ID_TAG, URL_TAG, NSOBID_TAG})

_META_FIELDS = {
    TITLE_TAG: "title",
    PROGRAM_ID_TAG: "program_id",
    URL_TAG: "url",
}

PatchTextSource = Union[str, TextIO, Iterable[str]]


def read_source_lines(source: PatchTextSource) -> List[str]:
    """Materialize a patch text source into a list of lines.

    Seekable streams are put back where they were, so the caller can read
    them again.
    """
    if isinstance(source, str):
        return [line.rstrip("\n") for line in io.StringIO(source)]
    if hasattr(source, "seekable") and source.seekable():
        start = source.tell()
        lines = [line.rstrip("\n") for line in source]
        source.seek(start)
        return lines
    return [line.rstrip("\n") for line in source]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def scan_meta(lines: Sequence[str], sink: Optional[DiagnosticSink] = None) -> PatchTextMeta:
    """Read the metadata block at the top of ``lines``.

    ``lines`` is not consumed; the body parser reads it again from the top.
    """
    diag = Diagnostics(sink)
    meta = PatchTextMeta()
    title_set = False
    legacy_title = ""

    for line_num, raw_line in enumerate(lines, start=1):
        line = trim(raw_line)
        if not line:
            diag.info("done parsing meta", line_num)
            break

        code, _ = strip_comment(line)
        if code.startswith("@"):
            tag = first_token(code).lower()
            if tag == STOP_PARSING_TAG:
                diag.info("done parsing meta (reached tag @stop)", line_num)
                break
            attr = _META_FIELDS.get(tag)
            if attr is not None:
                value = _unquote(trim(code[len(tag):]))
                setattr(meta, attr, value)
                if attr == "title":
                    title_set = True
                diag.info(f"meta: {tag}={value}", line_num)
        elif code.startswith("#"):
            diag.info(code, line_num)
            legacy_title = ltrim(code[1:])
    else:
        diag.info("meta parsing reached end of file")

    if not title_set:
        meta.title = legacy_title
        if legacy_title:
            diag.info(f'using "{legacy_title}" as legacy style title')

    return meta


def get_pchtxt_meta(source: PatchTextSource, sink: Optional[DiagnosticSink] = None) -> PatchTextMeta:
    """Read only the metadata of a patch text.

    Args:
        source: Patch text as a string, a text stream or an iterable of lines
        sink: Receives diagnostic events (defaults to the ``pchtxt.patching`` logger)

    Returns:
        PatchTextMeta with title, program id and url
    """
    return scan_meta(read_source_lines(source), sink)
