"""Storage of vocabularies."""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from linguaevo.entity import Vocab, VocabularyNotFoundError, VocabWithUser
from linguaevo.repository.access import AccessRepoMixin
from linguaevo.repository.common import (
    SEARCH_FILTER,
    access_ids,
    get_equal_language,
    get_sorted,
)
from linguaevo.repository.user import UserRepoMixin
from linguaevo.repository.word import WordRepoMixin


class VocabRepo(AccessRepoMixin, UserRepoMixin, WordRepoMixin):
    """Repository of vocabularies, their words and the access granted to them."""

    def add_vocab(self, vocab: Vocab) -> uuid.UUID:
        """Insert a vocabulary and return its new id."""
        query = """
        INSERT INTO vocabulary (
            id,
            user_id,
            name,
            native_lang,
            translate_lang,
            description,
            updated_at,
            created_at,
            access)
        VALUES($1, $2, $3, $4, $5, $6, $7, $7, $8);"""
        vid = uuid.uuid4()
        self._execute(
            query,
            vid,
            vocab.user_id,
            vocab.name,
            vocab.native_lang,
            vocab.translate_lang,
            vocab.description,
            datetime.now(timezone.utc),
            vocab.access,
        )
        return vid

    def delete_vocab(self, vocab: Vocab) -> None:
        """Delete the user's vocabulary with the given name."""
        query = "DELETE FROM vocabulary WHERE user_id=$1 AND name=$2;"
        if self._execute(query, vocab.user_id, vocab.name) == 0:
            raise VocabularyNotFoundError()

    def get_vocab(self, vid: uuid.UUID) -> Vocab:
        query = """
        SELECT
            id,
            user_id,
            name,
            native_lang,
            translate_lang,
            description,
            access,
            created_at,
            updated_at
        FROM vocabulary v
        WHERE id=$1;"""
        (
            vocab_id,
            user_id,
            name,
            native_lang,
            translate_lang,
            description,
            access,
            created_at,
            updated_at,
        ) = self._fetch_one(query, vid)
        return Vocab(
            id=vocab_id,
            user_id=user_id,
            name=name,
            native_lang=native_lang,
            translate_lang=translate_lang,
            description=description,
            access=access,
            created_at=created_at,
            updated_at=updated_at,
        )

    def get_creator_vocab(self, vocab_id: uuid.UUID) -> uuid.UUID:
        (user_id,) = self._fetch_one("SELECT user_id FROM vocabulary WHERE id=$1;", vocab_id)
        return user_id

    def get_by_name(self, user_id: uuid.UUID, name: str) -> Vocab:
        query = """
        SELECT id, user_id, name, native_lang, translate_lang, description
        FROM vocabulary v
        WHERE user_id=$1 AND name=$2;"""
        vocab_id, owner, vocab_name, native_lang, translate_lang, description = (
            self._fetch_one(query, user_id, name)
        )
        return Vocab(
            id=vocab_id,
            user_id=owner,
            name=vocab_name,
            native_lang=native_lang,
            translate_lang=translate_lang,
            description=description,
        )

    def get_tags_vocabulary(self, vocab_id: uuid.UUID) -> list[str]:
        query = """
        SELECT "text"
        FROM tag t
        LEFT JOIN vocabulary v ON t.id = ANY(v.tags)
        WHERE v.id=$1;"""
        return [tag for (tag,) in self._fetch_all(query, vocab_id)]

    def get_count_vocabularies(self, user_id: uuid.UUID) -> int:
        (count,) = self._fetch_one(
            "SELECT COUNT(id) FROM vocabulary WHERE user_id=$1;", user_id
        )
        return int(count)

    def edit_vocab(self, vocab: Vocab) -> None:
        query = "UPDATE vocabulary SET name=$2, access=$3, description=$4 WHERE id=$1;"
        if self._execute(query, vocab.id, vocab.name, vocab.access, vocab.description) == 0:
            raise VocabularyNotFoundError()

    def get_vocabularies_count_by_access(
        self,
        uid: uuid.UUID,
        access_types: Iterable[int],
        search: str,
        native_lang: str,
        translate_lang: str,
    ) -> int:
        query = f"""
        SELECT count(v.id)
        FROM vocabulary v
        WHERE (v.user_id=$1 OR v.access = ANY($2))
            AND {SEARCH_FILTER} {get_equal_language("native_lang", native_lang)} {get_equal_language("translate_lang", translate_lang)};"""
        (count,) = self._fetch_one(query, uid, access_ids(access_types), search)
        return int(count)

    def get_vocabularies_by_access(
        self,
        uid: uuid.UUID,
        access_types: Iterable[int],
        page: int,
        items_per_page: int,
        type_sort: int,
        order: int,
        search: str,
        native_lang: str,
        translate_lang: str,
    ) -> list[VocabWithUser]:
        query = f"""
        SELECT
            v.id,
            v.user_id,
            u."nickname",
            v.name,
            v.native_lang,
            v.translate_lang,
            v.description,
            count(w.id) as "words_count",
            v.access,
            v.updated_at,
            v.created_at
        FROM vocabulary v
        LEFT JOIN users u ON u.id = v.user_id
        LEFT JOIN word w ON w.vocabulary_id = v.id
        WHERE (v.user_id=$1 OR v.access = ANY($2))
            AND {SEARCH_FILTER} {get_equal_language("v.native_lang", native_lang)} {get_equal_language("v.translate_lang", translate_lang)}
        GROUP BY v.id, u."nickname"
        {get_sorted(type_sort, order)}
        LIMIT $4
        OFFSET $5;"""
        rows = self._fetch_all(
            query,
            uid,
            access_ids(access_types),
            search,
            items_per_page,
            (page - 1) * items_per_page,
        )
        return [
            VocabWithUser(
                id=vid,
                user_id=user_id,
                user_name=nickname,
                name=name,
                native_lang=native,
                translate_lang=translate,
                description=description,
                words_count=words_count,
                access=access,
                updated_at=updated_at,
                created_at=created_at,
            )
            for (
                vid,
                user_id,
                nickname,
                name,
                native,
                translate,
                description,
                words_count,
                access,
                updated_at,
                created_at,
            ) in rows
        ]

    def get_access(self, vid: uuid.UUID) -> int:
        (access,) = self._fetch_one("SELECT access FROM vocabulary WHERE id=$1", vid)
        return int(access)

    def copy_vocab(self, uid: uuid.UUID, vid: uuid.UUID) -> uuid.UUID:
        """Copy a vocabulary to another owner and return the id of the copy."""
        vocab = self.get_vocab(vid)
        return self.add_vocab(dataclasses.replace(vocab, user_id=uid))

    def get_vocabs_with_count_words(
        self, uid: uuid.UUID, owner: uuid.UUID, access: Iterable[int]
    ) -> list[VocabWithUser]:
        """Return the owner's vocabularies with their word counts.

        ``notification`` tells whether ``uid`` follows each vocabulary.
        """
        ids = access_ids(access)
        (limit,) = self._fetch_one(
            """
            SELECT count(v.id) FROM vocabulary v
            WHERE v.user_id = $1 AND "access" = any($2)""",
            owner,
            ids,
        )
        query = """
        SELECT
            v.id,
            name,
            native_lang,
            translate_lang,
            access,
            count(w.id),
            count(vn.user_id)!=0 notification
        FROM vocabulary v
        LEFT JOIN word w ON w.vocabulary_id = v.id
        LEFT JOIN vocabulary_notifications vn ON vn.user_id=$3 AND vn.vocab_id=v.id
        WHERE v.user_id = $1 AND "access" = any($2)
        GROUP BY v.id
        LIMIT $4;"""
        return [
            VocabWithUser(
                id=vid,
                name=name,
                native_lang=native,
                translate_lang=translate,
                access=acc,
                words_count=words_count,
                notification=bool(notification),
            )
            for vid, name, native, translate, acc, words_count, notification in (
                self._fetch_all(query, owner, ids, uid, int(limit))
            )
        ]

    def get_with_count_words(self, vid: uuid.UUID) -> VocabWithUser:
        query = """
        SELECT
            v.id,
            v.name,
            v.user_id,
            native_lang,
            translate_lang,
            access,
            count(w.id),
            v.description,
            v.created_at,
            v.updated_at,
            u."nickname"
        FROM vocabulary v
        LEFT JOIN word w ON w.vocabulary_id = v.id
        LEFT JOIN users u ON u.id = v.user_id
        WHERE v.id = $1
        GROUP BY v.id, u."nickname";"""
        (
            vocab_id,
            name,
            user_id,
            native,
            translate,
            access,
            words_count,
            description,
            created_at,
            updated_at,
            nickname,
        ) = self._fetch_one(query, vid)
        return VocabWithUser(
            id=vocab_id,
            name=name,
            user_id=user_id,
            native_lang=native,
            translate_lang=translate,
            access=access,
            words_count=words_count,
            description=description,
            created_at=created_at,
            updated_at=updated_at,
            user_name=nickname,
        )

    @staticmethod
    def _ranked(rows: Iterable) -> list[VocabWithUser]:
        return [
            VocabWithUser(
                id=vid,
                user_id=user_id,
                name=name,
                native_lang=native,
                translate_lang=translate,
                access=access,
                words_count=words_count,
                description=description,
            )
            for vid, user_id, name, native, translate, access, words_count, description in rows
        ]

    def get_vocabularies_with_max_words(
        self, access: Iterable[int], limit: int
    ) -> list[VocabWithUser]:
        """Return non-empty vocabularies with the most words first."""
        query = """
        SELECT
            v.id,
            user_id,
            name,
            native_lang,
            translate_lang,
            access,
            count(w.id) cw,
            v.description
        FROM vocabulary v
        LEFT JOIN word w ON w.vocabulary_id = v.id
        WHERE v.access = ANY($2)
        GROUP BY v.id
        HAVING count(w.id) > 0
        ORDER BY cw DESC
        LIMIT $1"""
        return self._ranked(self._fetch_all(query, limit, access_ids(access)))

    def get_vocabularies_recommended(
        self, uid: uuid.UUID, access: Iterable[int], limit: int
    ) -> list[VocabWithUser]:
        """Return other users' vocabularies in the user's native languages, largest first."""
        query = """
        SELECT
            v.id,
            user_id,
            name,
            native_lang,
            translate_lang,
            access,
            count(w.id) cw,
            v.description
        FROM vocabulary v
        LEFT JOIN word w ON w.vocabulary_id = v.id
        WHERE v.access = ANY($2)
            AND v.native_lang = any(SELECT DISTINCT native_lang FROM vocabulary v WHERE v.user_id = $1)
            AND v.user_id != $1
        GROUP BY v.id
        HAVING count(w.id) > 0
        ORDER BY cw DESC
        LIMIT $3;"""
        return self._ranked(self._fetch_all(query, uid, access_ids(access), limit))