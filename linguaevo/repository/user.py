"""Queries over the vocabularies that belong to or are visible to a user."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence

from linguaevo.entity import VocabWithUser
from linguaevo.repository.common import (
    SEARCH_FILTER,
    RepoBase,
    access_ids,
    get_equal_language,
    get_sorted,
)

_OWNED_FIELDS = (
    "id",
    "user_id",
    "name",
    "native_lang",
    "translate_lang",
    "description",
    "access",
    "created_at",
    "user_name",
    "words_count",
)

_VISIBLE_FIELDS = (
    "id",
    "user_id",
    "user_name",
    "name",
    "native_lang",
    "translate_lang",
    "description",
    "words_count",
    "access",
    "updated_at",
    "created_at",
)

_OWNED_QUERY = """
SELECT voc.id, voc.user_id, voc.name, voc.native_lang, voc.translate_lang,
       voc.description, voc.access, voc.created_at, usr.nickname,
       COUNT(wrd.id) AS word_total
FROM vocabulary AS voc
LEFT JOIN users AS usr ON usr.id = voc.user_id
LEFT JOIN word AS wrd ON wrd.vocabulary_id = voc.id
WHERE voc.user_id = $1
GROUP BY voc.id, usr.nickname;"""


def _language_filters(prefix: str, native_lang: str, translate_lang: str) -> str:
    return " ".join(
        (
            get_equal_language(f"{prefix}native_lang", native_lang),
            get_equal_language(f"{prefix}translate_lang", translate_lang),
        )
    )


def _to_vocabs(rows: Iterable[Sequence], fields: Sequence[str]) -> list[VocabWithUser]:
    return [VocabWithUser(**dict(zip(fields, row))) for row in rows]


class UserRepoMixin(RepoBase):
    """Vocabulary lookups from the point of view of one user."""

    def get_vocabularies_by_user(self, user_id: uuid.UUID) -> list[VocabWithUser]:
        """Every vocabulary the user owns, with owner nickname and word count."""
        return _to_vocabs(self._fetch_all(_OWNED_QUERY, user_id), _OWNED_FIELDS)

    def get_vocabularies_count_by_user(
        self,
        uid: uuid.UUID,
        access_types: Iterable[int],
        search: str,
        native_lang: str,
        translate_lang: str,
    ) -> int:
        """Count the user's own matching vocabularies plus those of the users followed."""
        filters = _language_filters("v.", native_lang, translate_lang)
        query = (
            "SELECT "
            "(SELECT COUNT(*) FROM vocabulary AS v "
            f"WHERE v.user_id = $1 AND {SEARCH_FILTER} {filters}) "
            "+ (SELECT COUNT(*) FROM vocabulary AS sv "
            "JOIN subscribers AS sub ON sub.user_id = $1 AND sv.user_id = sub.subscribers_id "
            "WHERE sv.access = ANY($2)) AS total;"
        )
        (count,) = self._fetch_one(query, uid, access_ids(access_types), search)
        return int(count)

    def get_sorted_vocabularies_by_user(
        self,
        user_id: uuid.UUID,
        access_types: Iterable[int],
        page: int,
        items_per_page: int,
        type_sort: int,
        order: int,
        search: str,
        native_lang: str,
        translate_lang: str,
    ) -> list[VocabWithUser]:
        """One page of the user's own and followed vocabularies, filtered and sorted."""
        filters = _language_filters("v.", native_lang, translate_lang)
        query = (
            "WITH visible AS ("
            " SELECT vb.id, vb.user_id, acc.nickname, vb.name, vb.native_lang,"
            " vb.translate_lang, vb.description, COUNT(wd.id) AS words_count,"
            " vb.access, vb.updated_at, vb.created_at"
            " FROM vocabulary AS vb"
            " LEFT JOIN users AS acc ON acc.id = vb.user_id"
            " LEFT JOIN word AS wd ON wd.vocabulary_id = vb.id"
            " LEFT JOIN subscribers AS sub"
            " ON sub.subscribers_id = vb.user_id AND sub.user_id = $1"
            " WHERE vb.user_id = $1"
            " OR (sub.user_id IS NOT NULL AND vb.access = ANY($2))"
            " GROUP BY vb.id, acc.nickname)"
            " SELECT v.id, v.user_id, v.nickname, v.name, v.native_lang,"
            " v.translate_lang, v.description, v.words_count, v.access,"
            " v.updated_at, v.created_at"
            " FROM visible AS v"
            f" WHERE {SEARCH_FILTER} {filters}"
            f" {get_sorted(type_sort, order)}"
            " LIMIT $4 OFFSET $5;"
        )
        rows = self._fetch_all(
            query,
            user_id,
            access_ids(access_types),
            search,
            items_per_page,
            (page - 1) * items_per_page,
        )
        return _to_vocabs(rows, _VISIBLE_FIELDS)