"""Domain model dataclasses for lexin-sqlite.

Each record mirrors one element of the Lexin XML export. Fields declare
where their value comes from (an attribute, the element's own text, the
text of a child element, or nested child records); the generic decoder in
:mod:`lexin_sqlite.parser` reads those declarations. Absent scalars are
``""`` and absent lists are ``()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# XML field bindings
# ---------------------------------------------------------------------------

class XmlKind(str, Enum):
    """How a model field is populated from its element."""

    ATTR = "attr"
    TEXT = "text"
    ELEMENT = "element"
    CHILD = "child"
    CHILDREN = "children"


@dataclass(frozen=True, slots=True)
class XmlBinding:
    """Mapping of one dataclass field onto the XML document."""

    kind: XmlKind
    name: str | None = None
    record: type | None = None


def attr(name: str) -> Any:
    """Field read from attribute *name*."""
    return field(default="", metadata={"xml": XmlBinding(XmlKind.ATTR, name)})


def text() -> Any:
    """Field read from the element's own character data."""
    return field(default="", metadata={"xml": XmlBinding(XmlKind.TEXT)})


def element(name: str) -> Any:
    """Field read from the text of the last child element *name*."""
    return field(default="", metadata={"xml": XmlBinding(XmlKind.ELEMENT, name)})


def child(name: str, record: type) -> Any:
    """Field decoded from the last child element *name* as *record*."""
    return field(
        default_factory=record,
        metadata={"xml": XmlBinding(XmlKind.CHILD, name, record)},
    )


def children(name: str, record: type) -> Any:
    """Field decoded from every child element *name* as *record*."""
    return field(
        default=(),
        metadata={"xml": XmlBinding(XmlKind.CHILDREN, name, record)},
    )


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ReferenceType(str, Enum):
    """Closed set of reference kinds accepted by the store."""

    ANIMATION = "animation"
    COMPARE = "compare"
    PHONETIC = "phonetic"
    SEE = "see"


class IndexType(str, Enum):
    """Affix tag of an index entry."""

    PREFIX = "prefix"
    SUFFIX = "suffix"


# ---------------------------------------------------------------------------
# Leaf records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Meaning:
    content: str = text()
    matching_id: str = attr("MatchingID")


@dataclass(frozen=True, slots=True)
class Reference:
    """A pointer from a sense to another entry, animation or sound."""

    type: str = attr("TYPE")
    value: str = attr("VALUE")
    matching_id: str = attr("MatchingID")


@dataclass(frozen=True, slots=True)
class Comment:
    content: str = text()
    matching_id: str = attr("MatchingID")


@dataclass(frozen=True, slots=True)
class Explanation:
    content: str = text()
    matching_id: str = attr("MatchingID")


@dataclass(frozen=True, slots=True)
class Alternate:
    content: str = text()


@dataclass(frozen=True, slots=True)
class Antonym:
    value: str = attr("Value")


@dataclass(frozen=True, slots=True)
class Usage:
    content: str = text()
    matching_id: str = attr("MatchingID")


@dataclass(frozen=True, slots=True)
class Phonetic:
    """Pronunciation text plus the name of its audio file."""

    content: str = text()
    file: str = attr("File")

    @property
    def is_empty(self) -> bool:
        return self.content == "" and self.file == ""


@dataclass(frozen=True, slots=True)
class Illustration:
    type: str = attr("TYPE")
    value: str = attr("VALUE")
    norlexin: str = attr("Norlexin")


@dataclass(frozen=True, slots=True)
class Variant:
    content: str = text()
    description: str = attr("Description")


@dataclass(frozen=True, slots=True)
class Inflection:
    content: str = text()
    variants: tuple[Variant, ...] = children("Variant", Variant)


@dataclass(frozen=True, slots=True)
class Example:
    content: str = text()
    id: str = attr("ID")
    matching_id: str = attr("MatchingID")


@dataclass(frozen=True, slots=True)
class Idiom:
    content: str = text()
    id: str = attr("ID")
    matching_id: str = attr("MatchingID")


@dataclass(frozen=True, slots=True)
class Compound:
    """A compound word; ``inflection`` holds at most one inflection string."""

    content: str = text()
    id: str = attr("ID")
    description: str = attr("Description")
    matching_id: str = attr("MatchingID")
    inflection: str = element("Inflection")


@dataclass(frozen=True, slots=True)
class Derivation:
    """A derived word; ``inflection`` holds at most one inflection string."""

    content: str = text()
    id: str = attr("ID")
    description: str = attr("Description")
    inflection: str = element("Inflection")


@dataclass(frozen=True, slots=True)
class Index:
    value: str = attr("Value")
    type: str = attr("type")


# ---------------------------------------------------------------------------
# Senses, words and the dictionary
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BaseSense:
    """A word's meaning in the dictionary's base language."""

    meaning: Meaning = child("Meaning", Meaning)
    references: tuple[Reference, ...] = children("Reference", Reference)
    comments: tuple[Comment, ...] = children("Comment", Comment)
    explanations: tuple[Explanation, ...] = children("Explanation", Explanation)
    alternates: tuple[Alternate, ...] = children("Alternate", Alternate)
    antonyms: tuple[Antonym, ...] = children("Antonym", Antonym)
    usages: tuple[Usage, ...] = children("Usage", Usage)
    phonetic: Phonetic = child("Phonetic", Phonetic)
    illustrations: tuple[Illustration, ...] = children("Illustration", Illustration)
    inflections: tuple[Inflection, ...] = children("Inflection", Inflection)
    graminfo: str = element("Graminfo")
    examples: tuple[Example, ...] = children("Example", Example)
    idioms: tuple[Idiom, ...] = children("Idiom", Idiom)
    compounds: tuple[Compound, ...] = children("Compound", Compound)
    derivations: tuple[Derivation, ...] = children("Derivation", Derivation)
    indexes: tuple[Index, ...] = children("Index", Index)


@dataclass(frozen=True, slots=True)
class TargetSense:
    """A word's rendering in the target language.

    ``comment`` is the element's ``Comment`` attribute; ``comment_text`` is
    the text of its ``<Comment>`` child. Translation, synonym, comment and
    explanation are single-valued here, unlike on :class:`BaseSense`.
    """

    comment: str = attr("Comment")
    translation: str = element("Translation")
    synonym: str = element("Synonym")
    comment_text: str = element("Comment")
    explanation: str = element("Explanation")
    antonyms: tuple[Antonym, ...] = children("Antonym", Antonym)
    examples: tuple[Example, ...] = children("Example", Example)
    idioms: tuple[Idiom, ...] = children("Idiom", Idiom)
    compounds: tuple[Compound, ...] = children("Compound", Compound)
    derivations: tuple[Derivation, ...] = children("Derivation", Derivation)


@dataclass(frozen=True, slots=True)
class Word:
    """A dictionary entry with its base- and target-language senses."""

    value: str = attr("Value")
    variant: str = attr("Variant")
    type: str = attr("Type")
    id: str = attr("ID")
    variant_id: str = attr("VariantID")
    matching_id: str = attr("MatchingID")
    base_senses: tuple[BaseSense, ...] = children("BaseLang", BaseSense)
    target_senses: tuple[TargetSense, ...] = children("TargetLang", TargetSense)


@dataclass(frozen=True, slots=True)
class Dictionary:
    """Root of the document: one language pair and its words."""

    base_lang: str = attr("BaseLang")
    target_lang: str = attr("TargetLang")
    version: str = attr("Version")
    words: tuple[Word, ...] = children("Word", Word)


DICTIONARY_TAG = "Dictionary"


# ---------------------------------------------------------------------------
# Sense ownership of shared child rows
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BaseSenseOwner:
    """Shared child row attached to a ``base_langs`` row."""

    id: int


@dataclass(frozen=True, slots=True)
class TargetSenseOwner:
    """Shared child row attached to a ``target_langs`` row."""

    id: int


SenseOwner = BaseSenseOwner | TargetSenseOwner


# ---------------------------------------------------------------------------
# Load outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LoadResult:
    """Outcome of a committed import."""

    dictionary_id: int
    created: bool
    words: int
