"""
pchtxt2ips - Patch Text compiler

Compiles line-oriented patch text (.pchtxt) files into patch collections
and writes them as IPS32 binary patches.

    from pchtxt import parse_pchtxt, build_ips32

    output = parse_pchtxt(text)
    data = build_ips32(output.collections[0])
"""

from .patching import (
    CompiledOutput,
    DiagnosticCollector,
    Patch,
    PatchCollection,
    PatchContent,
    PatchTextMeta,
    PatchType,
    TargetType,
    build_ips32,
    get_pchtxt_meta,
    parse_pchtxt,
    write_ips32,
)
from .version import load_version

__version__ = load_version()

__all__ = [
    "CompiledOutput",
    "DiagnosticCollector",
    "Patch",
    "PatchCollection",
    "PatchContent",
    "PatchTextMeta",
    "PatchType",
    "TargetType",
    "build_ips32",
    "get_pchtxt_meta",
    "parse_pchtxt",
    "write_ips32",
]
