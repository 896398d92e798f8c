"""Decode a Lexin XML export into :mod:`lexin_sqlite.models` records."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import fields
from pathlib import Path
from typing import IO, Any, TypeVar

from lexin_sqlite.exceptions import DataImportError
from lexin_sqlite.models import DICTIONARY_TAG, Dictionary, XmlBinding, XmlKind

logger = logging.getLogger(__name__)

_R = TypeVar("_R")


def parse_xml_file(path: str | Path) -> Dictionary:
    """Parse a Lexin XML file into a :class:`Dictionary`."""
    try:
        fh = open(path, "rb")
    except OSError as e:
        raise DataImportError(f"Failed to open XML file {str(path)!r}: {e}") from e
    with fh:
        return parse_xml(fh)


def parse_xml(source: IO[bytes] | str | Path) -> Dictionary:
    """Parse a Lexin document from a binary stream (or a path).

    Unknown elements and attributes are ignored. Raises
    :class:`DataImportError` if the document is not well-formed or its
    root element is not ``<Dictionary>``.
    """
    try:
        root = ET.parse(source).getroot()
    except ET.ParseError as e:
        raise DataImportError(f"Failed to decode XML: {e}") from e
    except OSError as e:
        raise DataImportError(f"Failed to read XML: {e}") from e

    tag = _local_name(root.tag)
    if tag != DICTIONARY_TAG:
        raise DataImportError(
            f"Failed to decode XML: expected element <{DICTIONARY_TAG}> "
            f"but found <{tag}>"
        )

    dictionary = decode(Dictionary, root)
    logger.debug(
        f"Decoded dictionary {dictionary.base_lang!r} -> "
        f"{dictionary.target_lang!r} with {len(dictionary.words)} words"
    )
    return dictionary


def decode(record: type[_R], elem: ET.Element) -> _R:
    """Populate *record* from *elem* following its fields' XML bindings.

    Elements and attributes are matched by local name. Single-valued
    bindings take the last matching child, list bindings take all of them
    in document order.
    """
    by_tag: dict[str, list[ET.Element]] = {}
    for sub in elem:
        if isinstance(sub.tag, str):
            by_tag.setdefault(_local_name(sub.tag), []).append(sub)
    attrs = {_local_name(k): v for k, v in elem.attrib.items()}

    values: dict[str, Any] = {}
    for f in fields(record):  # type: ignore[arg-type]
        binding: XmlBinding = f.metadata["xml"]
        if binding.kind is XmlKind.ATTR:
            values[f.name] = attrs.get(binding.name, "")
        elif binding.kind is XmlKind.TEXT:
            values[f.name] = chardata(elem)
        elif binding.kind is XmlKind.ELEMENT:
            found = by_tag.get(binding.name)
            values[f.name] = chardata(found[-1]) if found else ""
        elif binding.kind is XmlKind.CHILD:
            found = by_tag.get(binding.name)
            values[f.name] = (
                decode(binding.record, found[-1]) if found else binding.record()
            )
        else:
            values[f.name] = tuple(
                decode(binding.record, sub)
                for sub in by_tag.get(binding.name, ())
            )
    return record(**values)


def chardata(elem: ET.Element) -> str:
    """Return the element's own character data, untrimmed.

    Text inside nested elements is excluded; text between and after them
    is kept.
    """
    parts = [elem.text or ""]
    parts.extend(sub.tail or "" for sub in elem)
    return "".join(parts)


def _local_name(tag: str) -> str:
    # "{namespace}Word" -> "Word"
    return tag.rsplit("}", 1)[-1]
