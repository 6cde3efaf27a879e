from __future__ import annotations

import io

from pchtxt.patching import DiagnosticCollector, get_pchtxt_meta, scan_meta


def test_meta_tags_are_read_until_blank_line(collector: DiagnosticCollector) -> None:
    lines = [
        '@title "Super Game"',
        "@program 0100000000010000",
        '@url "https://example.com/game.pchtxt"',
        "",
        "@title ignored after blank line",
    ]
    meta = scan_meta(lines, collector)

    assert meta.title == "Super Game"
    assert meta.program_id == "0100000000010000"
    assert meta.url == "https://example.com/game.pchtxt"
    assert "L4: done parsing meta" in collector.messages()


def test_meta_tag_names_are_case_insensitive_values_keep_case() -> None:
    meta = scan_meta(["@TITLE Mixed Case Title"], DiagnosticCollector())
    assert meta.title == "Mixed Case Title"


def test_meta_stops_at_stop_tag() -> None:
    meta = scan_meta(["@program 0100", "@stop", "@url late"], DiagnosticCollector())
    assert meta.program_id == "0100"
    assert meta.url == ""


def test_unquoted_url_is_cut_at_comment() -> None:
    meta = scan_meta(["@url https://example.com"], DiagnosticCollector())
    assert meta.url == "https:"


def test_legacy_title_from_last_echo_line() -> None:
    lines = ["# First Title", "#  Second Title  ", "@nsobid ABCDEF"]
    meta = scan_meta(lines, DiagnosticCollector())
    assert meta.title == "Second Title"


def test_explicit_title_wins_over_legacy_title() -> None:
    meta = scan_meta(["# Legacy", "@title Real"], DiagnosticCollector())
    assert meta.title == "Real"


def test_single_quote_character_is_not_unquoted() -> None:
    meta = scan_meta(['@title "'], DiagnosticCollector())
    assert meta.title == '"'


def test_get_pchtxt_meta_restores_stream_position() -> None:
    stream = io.StringIO("@title T\n\n@flag nsobid 01\n")
    meta = get_pchtxt_meta(stream, DiagnosticCollector())

    assert meta.title == "T"
    assert stream.tell() == 0
