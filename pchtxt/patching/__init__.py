"""Patch text compilation.

Features:
- Patch text parser - compile .pchtxt files into patch collections
- Metadata scanner - title, program id and url of a patch text
- IPS32 writer - serialize one collection as an IPS32 container
- IPS/IPS32 patcher - apply IPS-family patches to binary images
"""

from .diagnostics import (
    DiagnosticCollector,
    DiagnosticEvent,
    DiagnosticLevel,
    DiagnosticSink,
    LoggingSink,
)
from .meta_scanner import (
    get_pchtxt_meta,
    scan_meta,
)
from .models import (
    CompiledOutput,
    Patch,
    PatchCollection,
    PatchContent,
    PatchTextMeta,
    PatchType,
    TargetType,
)
from .parser import (
    ParserState,
    PatchTextParser,
    parse_pchtxt,
)
from .patcher import (
    IpsRecord,
    Patcher,
    PatchFormat,
    PatchResult,
    build_ips32,
    detect_format,
    read_ips_records,
    write_ips32,
    write_ips32_file,
)

__all__ = [
    # Diagnostics
    "DiagnosticCollector",
    "DiagnosticEvent",
    "DiagnosticLevel",
    "DiagnosticSink",
    "LoggingSink",
    # Model
    "CompiledOutput",
    "Patch",
    "PatchCollection",
    "PatchContent",
    "PatchTextMeta",
    "PatchType",
    "TargetType",
    # Parsing
    "ParserState",
    "PatchTextParser",
    "get_pchtxt_meta",
    "parse_pchtxt",
    "scan_meta",
    # IPS
    "IpsRecord",
    "Patcher",
    "PatchFormat",
    "PatchResult",
    "build_ips32",
    "detect_format",
    "read_ips_records",
    "write_ips32",
    "write_ips32_file",
]
