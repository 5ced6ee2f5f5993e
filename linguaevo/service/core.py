"""The vocabulary service: listing, access checks, copying and recommendations."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from collections.abc import Iterable
from typing import Any

from linguaevo.entity import (
    NIL_UUID,
    AccessDeniedError,
    Vocab,
    VocabWithUser,
    VocabWithUserAndWords,
)
from linguaevo.runtime import AccessStatus, AccessType
from linguaevo.service.access import AccessServiceMixin
from linguaevo.service.user import UserServiceMixin
from linguaevo.service.word import WordServiceMixin

logger = logging.getLogger(__name__)

_LISTED_ACCESS = (AccessType.SUBSCRIBERS, AccessType.PUBLIC)
_RECOMMENDED_ACCESS = (int(AccessType.PUBLIC), int(AccessType.SUBSCRIBERS))
_RECOMMENDED_LIMIT = 3


class Service(AccessServiceMixin, UserServiceMixin, WordServiceMixin):
    """Vocabulary service working through a repository and helper services.

    ``transactor.transaction()`` must be a context manager; ``subscribers_svc``
    must offer ``check(uid, sub_id)``.
    """

    def __init__(
        self,
        transactor: Any,
        repo: Any,
        example_svc: Any,
        dict_svc: Any,
        tag_svc: Any,
        subscribers_svc: Any,
        events_svc: Any,
    ) -> None:
        self._transactor = transactor
        self._repo = repo
        self._example_svc = example_svc
        self._dict_svc = dict_svc
        self._tag_svc = tag_svc
        self._subscribers_svc = subscribers_svc
        self._events_svc = events_svc

    def get_vocabularies(
        self,
        uid: uuid.UUID,
        page: int,
        items_per_page: int,
        type_sort: int,
        order: int,
        search: str,
        native_lang: str,
        translate_lang: str,
        limit_words: int,
    ) -> tuple[list[VocabWithUserAndWords], int]:
        """Return one page of visible vocabularies, each with a few of its words, and the total."""
        access = list(_LISTED_ACCESS)
        count = self._repo.get_vocabularies_count_by_access(
            uid, access, search, native_lang, translate_lang
        )
        if count == 0:
            return [], 0

        vocabularies = self._repo.get_vocabularies_by_access(
            uid,
            access,
            page,
            items_per_page,
            type_sort,
            order,
            search,
            native_lang,
            translate_lang,
        )

        result = []
        for vocab in vocabularies or []:
            try:
                words = self.get_several_words(vocab.user_id, vocab.id, limit_words)
            except Exception as exc:  # a vocabulary without words is still listed
                logger.error("get vocabularies: get words: %s", exc)
                words = []
            texts = [word.native.text for word in words[:limit_words]]
            result.append(_with_words(vocab, texts))
        return result, count

    def get_vocabulary(self, uid: uuid.UUID, vid: uuid.UUID) -> Vocab:
        """Return a vocabulary the user may at least read; AccessDeniedError otherwise."""
        try:
            status = self.get_access_for_user(uid, vid)
        except Exception as exc:
            raise AccessDeniedError(f"access denied: {exc}") from exc
        if status == AccessStatus.FORBIDDEN:
            raise AccessDeniedError()
        return self._repo.get_vocab(vid)

    def get_access_for_user(self, uid: uuid.UUID, vid: uuid.UUID) -> AccessStatus:
        """Work out what the user may do with the vocabulary.

        Raises AccessDeniedError for an anonymous user and a non-public vocabulary.
        """
        access = int(self._repo.get_access(vid))
        if uid == NIL_UUID and access != AccessType.PUBLIC:
            raise AccessDeniedError()

        creator = self._repo.get_creator_vocab(vid)
        if creator == uid:
            return AccessStatus.EDIT

        if access == AccessType.PUBLIC:
            return AccessStatus.READ

        editable = self.vocabulary_editable(uid, vid)
        if self._subscribers_svc.check(uid, creator):
            return AccessStatus.EDIT if editable else AccessStatus.READ
        return AccessStatus.FORBIDDEN

    def copy_vocab(self, uid: uuid.UUID, vid: uuid.UUID) -> None:
        """Copy a vocabulary and all its words to the user."""
        copy_vid = self._repo.copy_vocab(uid, vid)
        self.copy_words(vid, copy_vid)

    def get_vocabularies_by_user(
        self, uid: uuid.UUID, owner: uuid.UUID, access: Iterable[int]
    ) -> list[VocabWithUser]:
        ids = [int(level) for level in access]
        return list(self._repo.get_vocabs_with_count_words(uid, owner, ids) or [])

    def get_vocabulary_info(self, uid: uuid.UUID, vid: uuid.UUID) -> VocabWithUser:
        """Return the vocabulary with its word count and whether the user may edit it."""
        vocab = self._repo.get_with_count_words(vid)
        if vocab.user_id != uid:
            vocab.editable = self.vocabulary_editable(uid, vid)
        else:
            vocab.editable = True
        return vocab

    def get_recommended_vocabularies(self, uid: uuid.UUID) -> list[VocabWithUser]:
        """Return the largest vocabularies, matched to the user's languages when known."""
        access = list(_RECOMMENDED_ACCESS)
        if uid == NIL_UUID:
            vocabs = self._repo.get_vocabularies_with_max_words(access, _RECOMMENDED_LIMIT)
        else:
            vocabs = self._repo.get_vocabularies_recommended(uid, access, _RECOMMENDED_LIMIT)
        return list(vocabs or [])


def _with_words(vocab: VocabWithUser, words: list[str]) -> VocabWithUserAndWords:
    values = {f.name: getattr(vocab, f.name) for f in dataclasses.fields(VocabWithUser)}
    return VocabWithUserAndWords(**values, words=words)