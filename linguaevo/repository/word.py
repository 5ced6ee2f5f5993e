"""Storage of the words that make up a vocabulary."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from linguaevo.entity import (
    DictWord,
    DuplicateError,
    Example,
    NoRowsError,
    VocabWord,
    VocabWordData,
)
from linguaevo.repository.common import RepoBase, get_dict_table, get_exam_table

UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: BaseException) -> bool:
    code = getattr(exc, "pgcode", None) or getattr(exc, "sqlstate", None)
    return code == UNIQUE_VIOLATION


def _rfc3339_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _dict_words(texts: Iterable[str] | None, lang_code: str = "") -> list[DictWord]:
    return [DictWord(text=text, lang_code=lang_code) for text in texts or ()]


def _examples(texts: Iterable[str] | None) -> list[Example]:
    return [Example(text=text) for text in texts or ()]


class WordRepoMixin(RepoBase):
    """Adds, reads, updates and removes the words of vocabularies."""

    def _vocab_langs(self, vocab_id: uuid.UUID) -> tuple[str, str]:
        native_lang, translate_lang = self._fetch_one(
            "SELECT native_lang, translate_lang FROM vocabulary WHERE id=$1", vocab_id
        )
        return native_lang, translate_lang

    def _update(self, query: str, *args: Any) -> None:
        if self._execute(query, *args) == 0:
            raise NoRowsError()

    def get_word(self, wid: uuid.UUID, native_lang: str, translate_lang: str) -> VocabWordData:
        query = f"""
        SELECT
            w.id,
            n.id as native_id,
            n."text",
            coalesce(w.pronunciation, '') as pronunciation,
            definition,
            array_agg(distinct t."text") FILTER (WHERE t."text" IS NOT NULL) translates,
            array_agg(distinct e."text") FILTER (WHERE e."text" IS NOT NULL) examples
        FROM word w
            LEFT JOIN {get_dict_table(native_lang)} n ON n.id = w.native_id
            LEFT JOIN {get_dict_table(translate_lang)} t ON t.id = ANY(w.translate_ids)
            LEFT JOIN {get_exam_table(native_lang)} e ON e.id = ANY(w.example_ids)
        WHERE w.id=$1
        GROUP BY w.id, n.id, n."text", w.pronunciation, n.lang_code;"""
        word_id, native_id, text, pronunciation, definition, translates, examples = (
            self._fetch_one(query, wid)
        )
        return VocabWordData(
            id=word_id,
            native=DictWord(id=native_id, text=text, pronunciation=pronunciation),
            definition=definition,
            translates=_dict_words(translates),
            examples=_examples(examples),
        )

    def add_word(self, word: VocabWord) -> uuid.UUID:
        """Insert a word and return its new id; DuplicateError if it already exists."""
        query = """
        INSERT INTO word (
            id,
            vocabulary_id,
            native_id,
            pronunciation,
            definition,
            translate_ids,
            example_ids,
            updated_at,
            created_at)
        VALUES($1, $2, $3, $4, $5, $6, $7, $8, $8);"""
        word_id = uuid.uuid4()
        try:
            self._execute(
                query,
                word_id,
                word.vocab_id,
                word.native_id,
                word.pronunciation,
                word.definition,
                list(word.translate_ids),
                list(word.example_ids),
                datetime.now(timezone.utc),
            )
        except Exception as exc:
            if _is_unique_violation(exc):
                raise DuplicateError() from exc
            raise
        return word_id

    def get_words_from_vocabulary(self, vocab_id: uuid.UUID, capacity: int) -> list[str]:
        query = """
        SELECT text
        FROM dictionary
        WHERE id=any(
            SELECT native_id
            FROM word
            WHERE vocabulary_id=$1
                ORDER BY random() LIMIT $2)"""
        return [text for (text,) in self._fetch_all(query, vocab_id, capacity)]

    def get_random_word(self, vocab_id: uuid.UUID) -> VocabWord:
        query = (
            "SELECT native_id, translate_ids, example_ids FROM word "
            "WHERE vocabulary_id=$1 ORDER BY random() LIMIT 1;"
        )
        native_id, translate_ids, example_ids = self._fetch_one(query, vocab_id)
        return VocabWord(
            native_id=native_id,
            translate_ids=list(translate_ids or ()),
            example_ids=list(example_ids or ()),
        )

    def delete_word(self, vocab_word: VocabWord) -> None:
        query = "DELETE FROM word WHERE vocabulary_id=$1 AND id=$2;"
        self._update(query, vocab_word.vocab_id, vocab_word.id)

    def get_random_vocabulary(self, vocab_id: uuid.UUID, limit: int) -> list[VocabWordData]:
        native_lang, translate_lang = self._vocab_langs(vocab_id)
        query = f"""
        SELECT
            n.id as native_id,
            n."text",
            coalesce(w.pronunciation, '') as pronunciation,
            array_agg(distinct t."text") FILTER (WHERE t."text" IS NOT NULL) translates
        FROM word w
            LEFT JOIN {get_dict_table(native_lang)} n ON n.id = w.native_id
            LEFT JOIN {get_dict_table(translate_lang)} t ON t.id = ANY(w.translate_ids)
        WHERE vocabulary_id=$1
        GROUP BY n.id, n."text", w.pronunciation
        ORDER BY RANDOM()
        LIMIT $2;"""
        return [
            VocabWordData(
                native=DictWord(id=native_id, text=text, pronunciation=pronunciation),
                translates=_dict_words(translates),
            )
            for native_id, text, pronunciation, translates in self._fetch_all(
                query, vocab_id, limit
            )
        ]

    def get_vocabulary(self, vocab_id: uuid.UUID) -> list[VocabWord]:
        query = (
            "SELECT id, native_id, translate_ids, example_ids, updated_at, created_at "
            "FROM word WHERE vocabulary_id=$1;"
        )
        return [
            VocabWord(
                id=word_id,
                native_id=native_id,
                translate_ids=list(translate_ids or ()),
                example_ids=list(example_ids or ()),
                updated_at=updated_at,
                created_at=created_at,
            )
            for word_id, native_id, translate_ids, example_ids, updated_at, created_at in (
                self._fetch_all(query, vocab_id)
            )
        ]

    def _word_data_rows(
        self,
        rows: Iterable[Sequence[Any]],
        vocab_id: uuid.UUID,
        native_lang: str,
        translate_lang: str,
        *,
        with_definition: bool,
    ) -> list[VocabWordData]:
        words = []
        for row in rows:
            if with_definition:
                (word_id, native_id, text, pronunciation, definition,
                 translates, examples, updated_at, created_at) = row
            else:
                (word_id, native_id, text, pronunciation,
                 translates, examples, updated_at, created_at) = row
                definition = ""
            words.append(
                VocabWordData(
                    id=word_id,
                    vocab_id=vocab_id,
                    native=DictWord(
                        id=native_id,
                        text=text,
                        pronunciation=pronunciation,
                        lang_code=native_lang,
                    ),
                    definition=definition,
                    translates=_dict_words(translates, translate_lang),
                    examples=_examples(examples),
                    updated_at=updated_at,
                    created_at=created_at,
                )
            )
        return words

    def get_vocab_words(self, vocab_id: uuid.UUID) -> list[VocabWordData]:
        (count_rows,) = self._fetch_one(
            "SELECT count(*) FROM word WHERE vocabulary_id=$1", vocab_id
        )
        native_lang, translate_lang = self._vocab_langs(vocab_id)
        query = f"""
        SELECT
            w.id,
            n.id as native_id,
            n."text",
            coalesce(w.pronunciation, '') as pronunciation,
            definition,
            array_agg(distinct t."text") FILTER (WHERE t."text" IS NOT NULL) translates,
            array_agg(distinct e."text") FILTER (WHERE e."text" IS NOT NULL) examples,
            w.updated_at,
            w.created_at
        FROM word w
            LEFT JOIN {get_dict_table(native_lang)} n ON n.id = w.native_id
            LEFT JOIN {get_dict_table(translate_lang)} t ON t.id = ANY(w.translate_ids)
            LEFT JOIN {get_exam_table(native_lang)} e ON e.id = ANY(w.example_ids)
        WHERE w.vocabulary_id=$1
        GROUP BY w.id, n.id, n."text", w.pronunciation, n.lang_code
        LIMIT $2;"""
        rows = self._fetch_all(query, vocab_id, int(count_rows))
        return self._word_data_rows(
            rows, vocab_id, native_lang, translate_lang, with_definition=True
        )

    def get_vocab_several_words(
        self, vocab_id: uuid.UUID, count: int, native_lang: str, translate_lang: str
    ) -> list[VocabWordData]:
        query = f"""
        SELECT
            w.id,
            n.id as native_id,
            n."text",
            coalesce(w.pronunciation, '') as pronunciation,
            array_agg(distinct t."text") FILTER (WHERE t."text" IS NOT NULL) translates,
            array_agg(distinct e."text") FILTER (WHERE e."text" IS NOT NULL) examples,
            w.updated_at,
            w.created_at
        FROM word w
            LEFT JOIN {get_dict_table(native_lang)} n ON n.id = w.native_id
            LEFT JOIN {get_dict_table(translate_lang)} t ON t.id = ANY(w.translate_ids)
            LEFT JOIN {get_exam_table(native_lang)} e ON e.id = ANY(w.example_ids)
        WHERE w.vocabulary_id=$1
        GROUP BY w.id, n.id, n."text", w.pronunciation, n.lang_code
        LIMIT $2;"""
        rows = self._fetch_all(query, vocab_id, count)
        return self._word_data_rows(
            rows, vocab_id, native_lang, translate_lang, with_definition=False
        )

    def update_word(self, vocab_word: VocabWord) -> None:
        query = """
        UPDATE word
        SET native_id=$1,
            pronunciation=$2,
            definition=$3,
            translate_ids=$4,
            example_ids=$5,
            updated_at=$6
        WHERE id=$7;"""
        self._update(
            query,
            vocab_word.native_id,
            vocab_word.pronunciation,
            vocab_word.definition,
            list(vocab_word.translate_ids),
            list(vocab_word.example_ids),
            _rfc3339_now(),
            vocab_word.id,
        )

    def update_word_text(self, vocab_word: VocabWord) -> None:
        query = "UPDATE word SET native_id=$1, updated_at=$2 WHERE id=$3;"
        self._update(query, vocab_word.native_id, _rfc3339_now(), vocab_word.id)

    def update_word_pronunciation(self, vocab_word: VocabWord) -> None:
        query = "UPDATE word SET pronunciation=$1, updated_at=$2 WHERE id=$3;"
        self._update(query, vocab_word.pronunciation, _rfc3339_now(), vocab_word.id)

    def update_word_definition(self, vocab_word: VocabWord) -> None:
        query = "UPDATE word SET definition=$1, updated_at=$2 WHERE id=$3;"
        self._update(query, vocab_word.definition, _rfc3339_now(), vocab_word.id)

    def update_word_translates(self, vocab_word: VocabWord) -> None:
        query = "UPDATE word SET translate_ids=$1, updated_at=$2 WHERE id=$3;"
        self._update(query, list(vocab_word.translate_ids), _rfc3339_now(), vocab_word.id)

    def update_word_examples(self, vocab_word: VocabWord) -> None:
        query = "UPDATE word SET example_ids=$1, updated_at=$2 WHERE id=$3;"
        self._update(query, list(vocab_word.example_ids), _rfc3339_now(), vocab_word.id)

    def get_count_words(self, user_id: uuid.UUID) -> int:
        query = (
            "SELECT count(id) FROM word WHERE vocabulary_id=ANY"
            "(SELECT id FROM vocabulary WHERE user_id=$1);"
        )
        (count,) = self._fetch_one(query, user_id)
        return int(count)