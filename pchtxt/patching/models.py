"""Data model for compiled patch texts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class PatchType(Enum):
    """Kind of patch a content block describes."""

    BINARY = auto()  # offset/value pairs written into the image
    HEAP = auto()  # offset/value pairs relative to the heap
    CHEAT = auto()  # plain-text cheat lines (AMS)


class TargetType(Enum):
    """Kind of binary image a collection targets."""

    SHARED_OBJECT = auto()  # NSO
    EXECUTABLE = auto()  # NRO


@dataclass(frozen=True)
class PatchContent:
    """One write: ``value`` at ``offset``. Cheat lines keep offset 0."""

    offset: int
    value: bytes

    @property
    def text(self) -> str:
        return self.value.decode("utf-8", errors="replace")


@dataclass
class Patch:
    """A named patch with its ordered content entries."""

    name: str = ""
    author: str = ""
    type: PatchType = PatchType.BINARY
    enabled: bool = False
    source_line: int = 0
    contents: List[PatchContent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "author": self.author,
            "type": self.type.name,
            "enabled": self.enabled,
            "source_line": self.source_line,
            "contents": [
                {
                    "offset": content.offset,
                    "value": content.text if self.type is PatchType.CHEAT else content.value.hex(),
                }
                for content in self.contents
            ],
        }


@dataclass
class PatchCollection:
    """All patches for one target binary, keyed by its build id."""

    build_id: str = ""
    target_type: TargetType = TargetType.SHARED_OBJECT
    patches: List[Patch] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "build_id": self.build_id,
            "target_type": self.target_type.name,
            "patches": [patch.to_dict() for patch in self.patches],
        }


@dataclass
class PatchTextMeta:
    """Descriptive header of a patch text."""

    title: str = ""
    program_id: str = ""
    url: str = ""


@dataclass
class CompiledOutput:
    """Everything parsed from one patch text."""

    meta: PatchTextMeta = field(default_factory=PatchTextMeta)
    collections: List[PatchCollection] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.collections

    def find_collection(self, build_id: str) -> Optional[PatchCollection]:
        for collection in self.collections:
            if collection.build_id == build_id:
                return collection
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meta": {
                "title": self.meta.title,
                "program_id": self.meta.program_id,
                "url": self.meta.url,
            },
            "collections": [collection.to_dict() for collection in self.collections],
        }
