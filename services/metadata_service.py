from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable

from models.document import MetadataDocument, MetadataEntry, StructureElement

LOGGER = logging.getLogger(__name__)


class MetadataService:
    """Load, edit and persist JSON metadata documents."""

    def read(self, path: Path) -> MetadataDocument:
        if not path.exists():
            raise FileNotFoundError(f"Missing metadata file: {path}")
        data = json.loads(path.read_text(encoding="utf-8"))
        document = MetadataDocument(path=path, root=_element_from_dict(data))
        LOGGER.debug("Read metadata document %s (%s)", path, document.root.type)
        return document

    def subject_for(self, element: StructureElement, metadata_type: str) -> str:
        values = element.values_of(metadata_type)
        # With repeated entries the last one wins.
        return values[-1] if values else ""

    def remove_values(self, element: StructureElement, metadata_type: str) -> int:
        before = len(element.metadata)
        element.metadata = [entry for entry in element.metadata if entry.type != metadata_type]
        return before - len(element.metadata)

    def replace_values(self, element: StructureElement, metadata_type: str, values: Iterable[str]) -> int:
        removed = self.remove_values(element, metadata_type)
        for value in sorted(set(values)):
            element.metadata.append(MetadataEntry(type=metadata_type, value=value))
        return removed

    def write(self, document: MetadataDocument) -> None:
        payload = json.dumps(_element_to_dict(document.root), indent=2, ensure_ascii=False)
        directory = document.path.parent
        fd, tmp_name = tempfile.mkstemp(prefix=f".{document.path.name}.", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, document.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        LOGGER.debug("Wrote metadata document %s", document.path)


def _element_from_dict(data: Dict) -> StructureElement:
    if not isinstance(data, dict) or "type" not in data:
        raise ValueError("Metadata element must be an object with a 'type'")
    return StructureElement(
        type=str(data["type"]),
        anchor=bool(data.get("anchor", False)),
        metadata=[
            MetadataEntry(type=str(item["type"]), value=str(item.get("value", "")))
            for item in data.get("metadata", [])
        ],
        children=[_element_from_dict(child) for child in data.get("children", [])],
    )


def _element_to_dict(element: StructureElement) -> Dict:
    payload: Dict = {"type": element.type}
    if element.anchor:
        payload["anchor"] = True
    payload["metadata"] = [{"type": entry.type, "value": entry.value} for entry in element.metadata]
    if element.children:
        payload["children"] = [_element_to_dict(child) for child in element.children]
    return payload
