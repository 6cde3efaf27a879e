import logging

import pytest

from pchtxt.exceptions import FileOperationError
from pchtxt.patching import (
    DiagnosticCollector,
    Patch,
    PatchCollection,
    PatchContent,
    PatchType,
    build_ips32,
    parse_pchtxt,
    write_ips32_file,
)


def _collection(*patches: Patch) -> PatchCollection:
    return PatchCollection(build_id="ABCDEF", patches=list(patches))


def test_single_record_layout():
    patch = Patch(name="p", enabled=True, contents=[PatchContent(0x100, b"\xde\xad")])
    data = build_ips32(_collection(patch))

    assert data == b"IPS32" + b"\x00\x00\x01\x00" + b"\x00\x02" + b"\xde\xad" + b"EEOF"
    assert len(data) == 21


def test_empty_collection_is_header_and_footer():
    assert build_ips32(_collection()) == b"IPS32EEOF"


def test_disabled_heap_and_cheat_patches_are_skipped():
    patches = [
        Patch(name="off", enabled=False, contents=[PatchContent(0x10, b"\x01")]),
        Patch(name="heap", enabled=True, type=PatchType.HEAP, contents=[PatchContent(0x20, b"\x02")]),
        Patch(name="cheat", enabled=True, type=PatchType.CHEAT, contents=[PatchContent(0, b"04000000 1 2")]),
        Patch(name="on", enabled=True, contents=[PatchContent(0x30, b"\x03")]),
    ]
    data = build_ips32(_collection(*patches))
    assert data == b"IPS32" + b"\x00\x00\x00\x30\x00\x01\x03" + b"EEOF"


def test_records_keep_patch_and_content_order():
    patches = [
        Patch(enabled=True, contents=[PatchContent(0x200, b"\xaa"), PatchContent(0x100, b"\xbb")]),
        Patch(enabled=True, contents=[PatchContent(0x050, b"\xcc")]),
    ]
    data = build_ips32(_collection(*patches))
    body = data[5:-4]
    assert body == (
        b"\x00\x00\x02\x00\x00\x01\xaa"
        b"\x00\x00\x01\x00\x00\x01\xbb"
        b"\x00\x00\x00\x50\x00\x01\xcc"
    )


def test_oversized_value_wraps_size_field(caplog):
    value = b"\x11" * 0x10001
    patch = Patch(name="huge", enabled=True, contents=[PatchContent(0, value)])

    with caplog.at_level(logging.WARNING, logger="pchtxt.patching.patcher"):
        data = build_ips32(_collection(patch))

    assert data[9:11] == b"\x00\x01"
    assert len(data) == 5 + 6 + len(value) + 4
    assert "overflows" in caplog.text


def test_compiled_text_to_ips32():
    text = '@flag nsobid ABCDEF\n@enabled\n0100 DEAD\n0200 "A"\n'
    output = parse_pchtxt(text, DiagnosticCollector())
    data = build_ips32(output.collections[0])
    assert data == (
        b"IPS32"
        b"\x00\x00\x01\x00\x00\x02\xde\xad"
        b"\x00\x00\x02\x00\x00\x02A\x00"
        b"EEOF"
    )


def test_write_ips32_file_creates_directories(tmp_path):
    patch = Patch(enabled=True, contents=[PatchContent(1, b"\x01")])
    target = write_ips32_file(_collection(patch), tmp_path / "out" / "ABCDEF.ips")

    assert target.read_bytes() == b"IPS32\x00\x00\x00\x01\x00\x01\x01EEOF"


def test_write_ips32_file_reports_os_errors(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")

    with pytest.raises(FileOperationError) as excinfo:
        write_ips32_file(_collection(), blocker / "ABCDEF.ips")

    assert excinfo.value.details["operation"] == "write"
