"""IPS32 Writer and IPS/IPS32 Patcher.

Writes compiled patch collections as IPS32 containers and applies
IPS-family patches to binary images:
- IPS   (International Patching System, 24-bit offsets)
- IPS32 (same record layout with 32-bit offsets)
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from enum import Enum, auto
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from ..exceptions import FileOperationError, IpsFormatError
from .models import PatchCollection, PatchType

logger = logging.getLogger(__name__)


class PatchFormat(Enum):
    """Supported patch formats."""

    IPS = auto()  # 24-bit offsets
    IPS32 = auto()  # 32-bit offsets
    UNKNOWN = auto()


# Magic bytes per format: (header, footer, offset width)
IPS_MAGIC = b"PATCH"
IPS_FOOTER = b"EOF"
IPS32_MAGIC = b"IPS32"
IPS32_FOOTER = b"EEOF"

_LAYOUTS = {
    PatchFormat.IPS: (IPS_MAGIC, IPS_FOOTER, 3),
    PatchFormat.IPS32: (IPS32_MAGIC, IPS32_FOOTER, 4),
}

_RECORD_HEADER = struct.Struct(">IH")


@dataclass(frozen=True)
class IpsRecord:
    """One decoded record: ``data`` is written at ``offset``."""

    offset: int
    data: bytes


@dataclass
class PatchResult:
    """Result of a patch operation."""

    success: bool
    output_path: Optional[str] = None
    original_size: int = 0
    patched_size: int = 0
    format_used: PatchFormat = PatchFormat.UNKNOWN
    records_applied: int = 0
    error: Optional[str] = None


# =====================================================================================================
# Writer
# =====================================================================================================

def write_ips32(collection: PatchCollection, stream: BinaryIO) -> int:
    """Write the enabled binary patches of one collection as IPS32.

    Layout: ``IPS32`` + records ``[offset:4 BE][size:2 BE][data]`` + ``EEOF``.
    The size field keeps only the low 16 bits of the value length, so values
    of 65536 bytes or more wrap.

    Args:
        collection: Patch collection for one binary
        stream: Writable binary stream

    Returns:
        Number of bytes written
    """
    written = stream.write(IPS32_MAGIC)
    for patch in collection.patches:
        if patch.type is not PatchType.BINARY or not patch.enabled:
            continue
        for content in patch.contents:
            if len(content.value) > 0xFFFF:
                logger.warning(
                    "value of %d bytes at offset 0x%08X in patch %r overflows the IPS32 size field",
                    len(content.value), content.offset, patch.name,
                )
            written += stream.write(_RECORD_HEADER.pack(content.offset & 0xFFFFFFFF, len(content.value) & 0xFFFF))
            written += stream.write(content.value)
    written += stream.write(IPS32_FOOTER)
    return written


def build_ips32(collection: PatchCollection) -> bytes:
    """Return the IPS32 container for a collection as bytes."""
    buffer = BytesIO()
    write_ips32(collection, buffer)
    return buffer.getvalue()


def write_ips32_file(collection: PatchCollection, path: Union[str, Path]) -> Path:
    """Write a collection to an IPS32 file, creating parent directories."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            size = write_ips32(collection, f)
    except OSError as exc:
        raise FileOperationError(f"cannot write IPS32 file: {exc}", str(target), "write") from exc
    logger.info("wrote %s (%d bytes) for build id %s", target, size, collection.build_id)
    return target


# =====================================================================================================
# Reader
# =====================================================================================================

def detect_format(data: bytes) -> PatchFormat:
    """Detect the patch format from the leading magic bytes."""
    if data.startswith(IPS32_MAGIC):
        return PatchFormat.IPS32
    if data.startswith(IPS_MAGIC):
        return PatchFormat.IPS
    return PatchFormat.UNKNOWN


def read_ips_records(data: bytes) -> List[IpsRecord]:
    """Decode every record of an IPS or IPS32 patch.

    Records: [offset(3|4) + size(2) + data(size)] or, when size is 0,
    the RLE form [offset(3|4) + 0x0000 + run(2) + fill byte(1)].
    The footer is only recognised as the final bytes of the data.

    Raises:
        IpsFormatError: for an unknown header or truncated records
    """
    patch_format = detect_format(data)
    if patch_format is PatchFormat.UNKNOWN:
        raise IpsFormatError("Invalid IPS header", 0)

    magic, footer, offset_width = _LAYOUTS[patch_format]
    records: List[IpsRecord] = []
    pos = len(magic)

    while True:
        remaining = len(data) - pos
        if remaining == len(footer) and data[pos:] == footer:
            break
        # IPS may append a 3-byte truncation size after EOF
        if patch_format is PatchFormat.IPS and remaining == 6 and data[pos:pos + 3] == footer:
            break
        if pos + offset_width + 2 > len(data):
            raise IpsFormatError("Truncated record header (missing footer?)", pos)

        offset = int.from_bytes(data[pos:pos + offset_width], "big")
        size = int.from_bytes(data[pos + offset_width:pos + offset_width + 2], "big")
        pos += offset_width + 2

        if size == 0:
            if pos + 3 > len(data):
                raise IpsFormatError("Truncated RLE record", pos)
            run = int.from_bytes(data[pos:pos + 2], "big")
            records.append(IpsRecord(offset, data[pos + 2:pos + 3] * run))
            pos += 3
        else:
            if pos + size > len(data):
                raise IpsFormatError("Truncated record data", pos)
            records.append(IpsRecord(offset, bytes(data[pos:pos + size])))
            pos += size

    return records


# =====================================================================================================
# Patcher
# =====================================================================================================

class Patcher:
    """Applies IPS and IPS32 patches to binary images."""

    def detect_format(self, patch_path: str) -> PatchFormat:
        """Detect patch format from file.

        Args:
            patch_path: Path to patch file

        Returns:
            Detected PatchFormat
        """
        try:
            with open(patch_path, "rb") as f:
                header = f.read(len(IPS_MAGIC))
        except OSError:
            return PatchFormat.UNKNOWN
        return detect_format(header)

    def apply_bytes(self, target: bytes, patch: bytes) -> bytearray:
        """Apply an in-memory patch to an in-memory image.

        The image grows (zero filled) when a record writes past its end.
        """
        output = bytearray(target)
        for record in read_ips_records(patch):
            end = record.offset + len(record.data)
            if end > len(output):
                output.extend(b"\x00" * (end - len(output)))
            output[record.offset:end] = record.data
        return output

    def apply(
        self,
        target_path: str,
        patch_path: str,
        output_path: Optional[str] = None,
    ) -> PatchResult:
        """Apply a patch file to a binary file.

        Args:
            target_path: Path to the source binary
            patch_path: Path to patch file
            output_path: Path for the patched binary (default: target_path with .patched suffix)

        Returns:
            PatchResult with status and details
        """
        patch_format = self.detect_format(patch_path)
        if patch_format is PatchFormat.UNKNOWN:
            return PatchResult(
                success=False,
                error=f"Unknown patch format: {patch_path}",
            )

        if output_path is None:
            target_p = Path(target_path)
            output_path = str(target_p.parent / f"{target_p.stem}.patched{target_p.suffix}")

        try:
            with open(target_path, "rb") as f:
                target_data = f.read()
            with open(patch_path, "rb") as f:
                patch_data = f.read()

            records = read_ips_records(patch_data)
            patched = self.apply_bytes(target_data, patch_data)

            with open(output_path, "wb") as f:
                f.write(patched)
        except (OSError, IpsFormatError) as e:
            logger.error("Patching %s with %s failed: %s", target_path, patch_path, e)
            return PatchResult(
                success=False,
                error=str(e),
                format_used=patch_format,
            )

        return PatchResult(
            success=True,
            output_path=output_path,
            original_size=len(target_data),
            patched_size=len(patched),
            format_used=patch_format,
            records_applied=len(records),
        )
