"""SyS-T collateral catalogs loaded from XML files."""

from __future__ import annotations

import sys
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar, Union

from .guid import Guid
from .printer import string_to_num

__all__ = [
    "CatalogEntry",
    "MaskedItem",
    "MaskedVector",
    "Collateral",
    "parse_xml",
]

TAG_COLLATERAL = "syst:Collateral"
TAG_CLIENT = "syst:Client"
TAG_GUIDS = "syst:Guids"
TAG_GUID = "syst:Guid"
TAG_BUILDS = "syst:Builds"
TAG_BUILD = "syst:Build"
TAG_CATALOG32 = "syst:Catalog32"
TAG_CATALOG64 = "syst:Catalog64"
TAG_SOURCE_FILES = "syst:SourceFiles"
TAG_FILE = "syst:File"
TAG_SHORT32 = "syst:Short32"
TAG_SHORT64 = "syst:Short64"
TAG_WRITE = "syst:Write"
TAG_PROTOCOL = "syst:Protocol"
TAG_MODULES = "syst:Modules"
TAG_MODULE = "syst:Module"
TAG_FORMAT = "syst:Format"

ATTR_ID = "ID"
ATTR_MASK = "Mask"
ATTR_FILE = "File"
ATTR_LINE = "Line"

Key = Union[int, Guid]
V = TypeVar("V")


@dataclass
class CatalogEntry:
    """A catalog message with its key mask and optional source position."""

    msg: str
    mask: int
    file: int = 0
    line: int = 0


@dataclass
class MaskedItem(Generic[V]):
    """A key/mask/value triple; the mask selects the key bits that count."""

    key: Key
    mask: Key
    value: V


def _value_text(value: object) -> str:
    return value.msg if isinstance(value, CatalogEntry) else str(value)


class MaskedVector(Generic[V]):
    """Ordered collection of masked items searched with each item's mask."""

    def __init__(self) -> None:
        self._items: list[MaskedItem[V]] = []

    def __iter__(self) -> Iterator[MaskedItem[V]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _index(self, key: Key) -> int | None:
        for index, item in enumerate(self._items):
            if (item.key & item.mask) == (key & item.mask):
                return index
        return None

    def find(self, key: Key) -> MaskedItem[V] | None:
        """Return the first item whose masked key matches key, or None."""
        index = self._index(key)
        return None if index is None else self._items[index]

    def add(self, item: MaskedItem[V]) -> None:
        """Add item; an existing match with a different value is replaced."""
        index = self._index(item.key)
        if index is not None:
            old = self._items[index]
            if _value_text(old.value) != _value_text(item.value):
                print(
                    f"Overwriting  ID{item.key} -> {_value_text(item.value)}"
                    f" old value: {_value_text(old.value)}",
                    file=sys.stderr,
                )
                self._items[index] = item
                return
        self._items.append(item)


def _local(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rpartition("}")[2].rpartition(":")[2]


def _child(element: ET.Element, tag: str) -> ET.Element | None:
    name = _local(tag)
    return next((c for c in element if _local(c.tag) == name), None)


def _children(element: ET.Element | None, tag: str) -> Iterator[ET.Element]:
    if element is None:
        return
    name = _local(tag)
    yield from (c for c in element if _local(c.tag) == name)


def _parse_key(text: str, bits: int | None) -> Key:
    if bits is None:
        return Guid.parse(text)
    return string_to_num(text, bits)


def _no_mask(bits: int | None) -> Key:
    if bits is None:
        return Guid(b"\xff" * 16)
    return (1 << bits) - 1


class Collateral:
    """Decode information for one SyS-T client taken from a collateral file."""

    def __init__(self, name: str, file_name: str) -> None:
        self.name = name
        self.file_name = file_name
        self.guids: MaskedVector[str] = MaskedVector()
        self.builds: MaskedVector[str] = MaskedVector()
        self.msgs32: MaskedVector[CatalogEntry] = MaskedVector()
        self.msgs64: MaskedVector[CatalogEntry] = MaskedVector()
        self.shorts32: MaskedVector[CatalogEntry] = MaskedVector()
        self.shorts64: MaskedVector[CatalogEntry] = MaskedVector()
        self.write_types: MaskedVector[str] = MaskedVector()
        self.files: MaskedVector[str] = MaskedVector()
        self.modules: MaskedVector[str] = MaskedVector()

    @classmethod
    def from_element(cls, element: ET.Element, file_name: str) -> "Collateral":
        """Build a collateral from a syst:Client element.

        Raises ValueError on malformed IDs, masks or source positions.
        """
        coll = cls(element.get("Name", ""), file_name)
        sections = (
            (TAG_GUIDS, TAG_GUID, coll.guids, None, False),
            (TAG_BUILDS, TAG_BUILD, coll.builds, 64, False),
            (TAG_SOURCE_FILES, TAG_FILE, coll.files, 32, False),
            (TAG_MODULES, TAG_MODULE, coll.modules, 32, False),
            (TAG_CATALOG32, TAG_FORMAT, coll.msgs32, 32, True),
            (TAG_CATALOG64, TAG_FORMAT, coll.msgs64, 64, True),
            (TAG_SHORT32, TAG_FORMAT, coll.shorts32, 32, True),
            (TAG_SHORT64, TAG_FORMAT, coll.shorts64, 64, True),
            (TAG_WRITE, TAG_PROTOCOL, coll.write_types, 8, False),
        )
        for section, tag, dest, bits, is_catalog in sections:
            coll._parse_items(_child(element, section), tag, dest, bits, is_catalog)
        return coll

    def _parse_items(self, root: ET.Element | None, tag: str, dest: MaskedVector,
                     bits: int | None, is_catalog: bool) -> None:
        for item in _children(root, tag):
            key_text = item.get(ATTR_ID, "")
            val = item.text or ""
            try:
                key = _parse_key(key_text, bits)
            except ValueError as exc:
                raise ValueError(
                    f'Malformed {tag}entry ID="{key_text}" value ="{val}"'
                    f" for catalog {self.name}"
                ) from exc

            mask_text = item.get(ATTR_MASK, "")
            if mask_text:
                try:
                    mask = _parse_key(mask_text, bits)
                except ValueError as exc:
                    raise ValueError(
                        f'Malformed {tag}entry Mask="{mask_text}" value ="{val}"'
                        f" for catalog {self.name}"
                    ) from exc
            else:
                mask = _no_mask(bits)

            value: object = val
            if is_catalog:
                entry = CatalogEntry(val, mask)
                for attr, field in ((ATTR_FILE, "file"), (ATTR_LINE, "line")):
                    text = item.get(attr, "")
                    if not text:
                        continue
                    try:
                        setattr(entry, field, string_to_num(text, 32))
                    except ValueError as exc:
                        raise ValueError(
                            f"Malformed {attr} attribute {text}in section {tag}"
                            f" for catalog {self.name}"
                        ) from exc
                value = entry

            dest.add(MaskedItem(key, mask, value))

    def match(self, guid: Guid, build: int) -> bool:
        """Check whether guid (and build, if non-zero) belongs to this catalog."""
        for item in self.guids:
            if (guid & item.mask) == (item.key & item.mask):
                if build == 0 or self.builds.find(build) is not None:
                    return True
        return False

    def catalog_entry(self, ident: int, bits: int) -> CatalogEntry | None:
        """Look up a catalog message by 32 or 64 bit ID."""
        hit = (self.msgs32 if bits == 32 else self.msgs64).find(ident)
        return hit.value if hit else None

    def short_entry(self, ident: int, bits: int) -> CatalogEntry | None:
        """Look up a short message by 32 or 64 bit value."""
        hit = (self.shorts32 if bits == 32 else self.shorts64).find(ident)
        return hit.value if hit else None

    def source_file(self, ident: int) -> str | None:
        """Return the source file name for a file ID."""
        hit = self.files.find(ident)
        return hit.value if hit else None

    def write_type(self, ident: int) -> str | None:
        """Return the write protocol name for a raw message subtype."""
        hit = self.write_types.find(ident)
        return hit.value if hit else None


def parse_xml(filename: str) -> list[Collateral]:
    """Load all clients of a collateral XML file.

    Raises ValueError if the file cannot be read or parsed.
    """
    try:
        tree = ET.parse(filename)
    except (ET.ParseError, OSError) as exc:
        raise ValueError(f"XML parser error on file {filename} : {exc}") from exc
    root = tree.getroot()
    if _local(root.tag) != _local(TAG_COLLATERAL):
        return []
    return [Collateral.from_element(client, filename)
            for client in _children(root, TAG_CLIENT)]