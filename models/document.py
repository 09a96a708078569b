from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass(slots=True)
class MetadataEntry:
    type: str
    value: str


@dataclass(slots=True)
class StructureElement:
    """Logical structure element of a digitized document."""

    type: str
    anchor: bool = False
    metadata: List[MetadataEntry] = field(default_factory=list)
    children: List["StructureElement"] = field(default_factory=list)

    def values_of(self, metadata_type: str) -> List[str]:
        return [entry.value for entry in self.metadata if entry.type == metadata_type]


@dataclass(slots=True)
class MetadataDocument:
    """A metadata file together with its top-level structure element."""

    path: Path
    root: StructureElement

    @property
    def logical(self) -> StructureElement:
        # Anchors (multi-volume works, periodicals) carry the volume as first child.
        if self.root.anchor and self.root.children:
            return self.root.children[0]
        return self.root
