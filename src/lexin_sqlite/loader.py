"""Persist a decoded Lexin dictionary into the normalized SQLite schema."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Sequence

from lexin_sqlite import db as _db
from lexin_sqlite.exceptions import ImportCancelledError, LoadError
from lexin_sqlite.models import (
    Antonym,
    BaseSense,
    BaseSenseOwner,
    Compound,
    Derivation,
    Dictionary,
    Example,
    Idiom,
    LoadResult,
    SenseOwner,
    TargetSense,
    TargetSenseOwner,
    Word,
)

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_EVERY = 1000


def store_dictionary(
    conn: sqlite3.Connection,
    dictionary: Dictionary,
    *,
    should_cancel: Callable[[], bool] | None = None,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
) -> LoadResult:
    """Insert *dictionary* and all its words in one transaction.

    An existing dictionary with the same language pair is reused and the
    words are appended to it. Any failure rolls back every row written by
    this call and raises :class:`LoadError`.
    """
    if should_cancel is not None and should_cancel():
        raise ImportCancelledError("Import cancelled before it started")

    loader = _DictionaryLoader(
        conn, should_cancel=should_cancel, progress_every=progress_every
    )
    try:
        with _db.transaction(conn):
            return loader.load(dictionary)
    except sqlite3.Error as e:
        raise LoadError(f"Transaction failed: {e}") from e


def _owner_ids(owner: SenseOwner) -> tuple[int | None, int | None]:
    """Return ``(base_lang_id, target_lang_id)`` for a shared child row."""
    if isinstance(owner, BaseSenseOwner):
        return owner.id, None
    return None, owner.id


class _DictionaryLoader:
    """Helper class to write one dictionary inside an open transaction."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        *,
        should_cancel: Callable[[], bool] | None = None,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
    ) -> None:
        self.conn = conn
        self.should_cancel = should_cancel
        self.progress_every = max(1, progress_every)

    def load(self, dictionary: Dictionary) -> LoadResult:
        dict_id, created = self._resolve_dictionary(dictionary)

        for index, word in enumerate(dictionary.words):
            if self.should_cancel is not None and self.should_cancel():
                raise ImportCancelledError(
                    f"Import cancelled after {index} words",
                    word_index=index,
                )
            if index > 0 and index % self.progress_every == 0:
                logger.info(f"Processed {index} words...")
            self._store_word(dict_id, index, word)

        return LoadResult(
            dictionary_id=dict_id, created=created, words=len(dictionary.words)
        )

    def _resolve_dictionary(self, dictionary: Dictionary) -> tuple[int, bool]:
        try:
            row = _db.get_dictionary_by_languages(
                self.conn, dictionary.base_lang, dictionary.target_lang
            )
        except sqlite3.Error as e:
            raise LoadError(f"Failed to check if dictionary exists: {e}") from e

        if row is not None:
            logger.info(
                f"Dictionary {dictionary.base_lang} to {dictionary.target_lang} "
                f"already exists, adding entries"
            )
            return row["id"], False

        try:
            dict_id = _db.create_dictionary(
                self.conn,
                dictionary.base_lang,
                dictionary.target_lang,
                dictionary.version,
            )
        except sqlite3.Error as e:
            raise LoadError(f"Failed to create dictionary: {e}") from e
        return dict_id, True

    # ------------------------------------------------------------------
    # Words and senses
    # ------------------------------------------------------------------

    def _store_word(self, dict_id: int, index: int, word: Word) -> None:
        sense: str | None = None
        try:
            cur = self.conn.execute(
                "INSERT INTO words "
                "(dictionary_id, value, variant, type, original_id, variant_id, matching_id) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (dict_id, word.value, word.variant or None, word.type,
                 word.id, word.variant_id, word.matching_id or None),
            )
            word_id = cur.lastrowid

            for n, base_sense in enumerate(word.base_senses, 1):
                sense = f"base sense #{n}"
                self._store_base_sense(word_id, base_sense)

            for n, target_sense in enumerate(word.target_senses, 1):
                sense = f"target sense #{n}"
                self._store_target_sense(word_id, target_sense)
        except Exception as e:
            where = f", {sense}" if sense else ""
            raise LoadError(
                f"Failed to store word {word.value!r} (#{index + 1}{where}): {e}",
                word_index=index,
                word_value=word.value,
                sense=sense,
            ) from e

    def _store_base_sense(self, word_id: int, sense: BaseSense) -> None:
        cur = self.conn.execute(
            "INSERT INTO base_langs (word_id, meaning, matching_id) VALUES (?, ?, ?)",
            (word_id, sense.meaning.content or None,
             sense.meaning.matching_id or None),
        )
        base_id = cur.lastrowid

        if sense.references:
            self.conn.executemany(
                'INSERT INTO "references" (base_lang_id, type, value, matching_id) '
                "VALUES (?, ?, ?, ?)",
                [(base_id, r.type, r.value, r.matching_id or None)
                 for r in sense.references],
            )

        if sense.comments:
            self.conn.executemany(
                "INSERT INTO comments (base_lang_id, content, matching_id) VALUES (?, ?, ?)",
                [(base_id, c.content, c.matching_id or None) for c in sense.comments],
            )

        if sense.explanations:
            self.conn.executemany(
                "INSERT INTO explanations (base_lang_id, content, matching_id) "
                "VALUES (?, ?, ?)",
                [(base_id, e.content, e.matching_id or None)
                 for e in sense.explanations],
            )

        if sense.alternates:
            self.conn.executemany(
                "INSERT INTO alternates (base_lang_id, content) VALUES (?, ?)",
                [(base_id, a.content) for a in sense.alternates],
            )

        owner = BaseSenseOwner(base_id)
        self._store_antonyms(owner, sense.antonyms)

        if sense.usages:
            self.conn.executemany(
                "INSERT INTO usages (base_lang_id, content, matching_id) VALUES (?, ?, ?)",
                [(base_id, u.content, u.matching_id or None) for u in sense.usages],
            )

        if not sense.phonetic.is_empty:
            self.conn.execute(
                "INSERT INTO phonetics (base_lang_id, content, file) VALUES (?, ?, ?)",
                (base_id, sense.phonetic.content or None, sense.phonetic.file or None),
            )

        if sense.illustrations:
            self.conn.executemany(
                "INSERT INTO illustrations (base_lang_id, type, value, norlexin) "
                "VALUES (?, ?, ?, ?)",
                [(base_id, i.type, i.value, i.norlexin or None)
                 for i in sense.illustrations],
            )

        for inflection in sense.inflections:
            cur = self.conn.execute(
                "INSERT INTO inflections (base_lang_id, content) VALUES (?, ?)",
                (base_id, inflection.content or None),
            )
            if inflection.variants:
                inflection_id = cur.lastrowid
                self.conn.executemany(
                    "INSERT INTO inflection_variants (inflection_id, content, description) "
                    "VALUES (?, ?, ?)",
                    [(inflection_id, v.content, v.description or None)
                     for v in inflection.variants],
                )

        if sense.graminfo:
            self.conn.execute(
                "INSERT INTO graminfos (base_lang_id, content) VALUES (?, ?)",
                (base_id, sense.graminfo),
            )

        self._store_examples(owner, sense.examples)
        self._store_idioms(owner, sense.idioms)
        self._store_compounds(owner, sense.compounds)
        self._store_derivations(owner, sense.derivations)

        if sense.indexes:
            self.conn.executemany(
                "INSERT INTO indexes (base_lang_id, value, type) VALUES (?, ?, ?)",
                [(base_id, i.value, i.type or None) for i in sense.indexes],
            )

    def _store_target_sense(self, word_id: int, sense: TargetSense) -> None:
        cur = self.conn.execute(
            "INSERT INTO target_langs (word_id, comment) VALUES (?, ?)",
            (word_id, sense.comment or None),
        )
        target_id = cur.lastrowid

        # Single-valued on the target side: at most one row each.
        for table, content in (
            ("translations", sense.translation),
            ("synonyms", sense.synonym),
            ("target_comments", sense.comment_text),
            ("target_explanations", sense.explanation),
        ):
            if content:
                self.conn.execute(
                    f"INSERT INTO {table} (target_lang_id, content) VALUES (?, ?)",
                    (target_id, content),
                )

        owner = TargetSenseOwner(target_id)
        self._store_antonyms(owner, sense.antonyms)
        self._store_examples(owner, sense.examples)
        self._store_idioms(owner, sense.idioms)
        self._store_compounds(owner, sense.compounds)
        self._store_derivations(owner, sense.derivations)

    # ------------------------------------------------------------------
    # Children shared by both sense kinds
    # ------------------------------------------------------------------

    def _store_antonyms(self, owner: SenseOwner, antonyms: Sequence[Antonym]) -> None:
        if not antonyms:
            return
        base_id, target_id = _owner_ids(owner)
        self.conn.executemany(
            "INSERT INTO antonyms (value, base_lang_id, target_lang_id) VALUES (?, ?, ?)",
            [(a.value, base_id, target_id) for a in antonyms],
        )

    def _store_examples(self, owner: SenseOwner, examples: Sequence[Example]) -> None:
        if not examples:
            return
        base_id, target_id = _owner_ids(owner)
        self.conn.executemany(
            "INSERT INTO examples "
            "(content, original_id, matching_id, base_lang_id, target_lang_id) "
            "VALUES (?, ?, ?, ?, ?)",
            [(e.content, e.id, e.matching_id or None, base_id, target_id)
             for e in examples],
        )

    def _store_idioms(self, owner: SenseOwner, idioms: Sequence[Idiom]) -> None:
        if not idioms:
            return
        base_id, target_id = _owner_ids(owner)
        self.conn.executemany(
            "INSERT INTO idioms "
            "(content, original_id, matching_id, base_lang_id, target_lang_id) "
            "VALUES (?, ?, ?, ?, ?)",
            [(i.content, i.id, i.matching_id or None, base_id, target_id)
             for i in idioms],
        )

    def _store_compounds(self, owner: SenseOwner, compounds: Sequence[Compound]) -> None:
        base_id, target_id = _owner_ids(owner)
        for compound in compounds:
            cur = self.conn.execute(
                "INSERT INTO compounds "
                "(content, original_id, description, matching_id, base_lang_id, target_lang_id) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (compound.content or None, compound.id,
                 compound.description or None, compound.matching_id or None,
                 base_id, target_id),
            )
            if compound.inflection:
                self.conn.execute(
                    "INSERT INTO compound_inflections (compound_id, content) VALUES (?, ?)",
                    (cur.lastrowid, compound.inflection),
                )

    def _store_derivations(
        self, owner: SenseOwner, derivations: Sequence[Derivation]
    ) -> None:
        base_id, target_id = _owner_ids(owner)
        for derivation in derivations:
            cur = self.conn.execute(
                "INSERT INTO derivations "
                "(content, original_id, description, base_lang_id, target_lang_id) "
                "VALUES (?, ?, ?, ?, ?)",
                (derivation.content or None, derivation.id,
                 derivation.description or None, base_id, target_id),
            )
            if derivation.inflection:
                self.conn.execute(
                    "INSERT INTO derivation_inflections (derivation_id, content) "
                    "VALUES (?, ?)",
                    (cur.lastrowid, derivation.inflection),
                )
