"""Operations a user performs on their own vocabularies."""

from __future__ import annotations

import uuid
from typing import Any

from linguaevo.entity import Vocab, VocabularyError, VocabWithUser
from linguaevo.runtime import AccessType

_VISIBLE_ACCESS = (AccessType.SUBSCRIBERS, AccessType.PUBLIC)


class UserServiceMixin:
    """User vocabulary operations.

    Expects the repository in ``self._repo`` and, in ``self._transactor``,
    an object whose ``transaction()`` is a context manager.
    """

    _repo: Any
    _transactor: Any

    def user_add_vocabulary(self, vocabulary: Vocab) -> Vocab:
        """Create a vocabulary and return it as stored.

        Raises VocabularyError when the user already has one with that name.
        """
        existing = self._repo.get_vocabularies_by_user(vocabulary.user_id) or []
        if any(vocab.name == vocabulary.name for vocab in existing):
            raise VocabularyError("already have vocabulary with same name")

        with self._transactor.transaction():
            vid = self._repo.add_vocab(vocabulary)
            return self._repo.get_vocab(vid)

    def user_delete_vocabulary(self, user_id: uuid.UUID, name: str) -> None:
        self._repo.delete_vocab(Vocab(user_id=user_id, name=name))

    def user_get_vocabularies(
        self,
        uid: uuid.UUID,
        page: int,
        items_per_page: int,
        type_sort: int,
        order: int,
        search: str,
        native_lang: str,
        translate_lang: str,
    ) -> tuple[list[VocabWithUser], int]:
        """Return one page of the user's and followed users' vocabularies and the total."""
        access = list(_VISIBLE_ACCESS)
        count = self._repo.get_vocabularies_count_by_user(
            uid, access, search, native_lang, translate_lang
        )
        if count == 0:
            return [], 0
        vocabs = self._repo.get_sorted_vocabularies_by_user(
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
        return list(vocabs or []), count

    def user_edit_vocabulary(self, vocab: Vocab) -> None:
        self._repo.edit_vocab(vocab)