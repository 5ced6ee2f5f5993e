"""Storage of per-user access to vocabularies."""

from __future__ import annotations

import uuid

from linguaevo.entity import VocabularyError
from linguaevo.repository.common import RepoBase


class AccessRepoMixin(RepoBase):
    """Grants and revokes a user's access to a vocabulary."""

    def add_access_for_user(self, vocab_id: uuid.UUID, user_id: uuid.UUID, is_editor: bool) -> None:
        query = (
            "INSERT INTO vocabulary_users_access (vocab_id, subscriber_id, editor) "
            "VALUES ($1, $2, $3);"
        )
        if self._execute(query, vocab_id, user_id, is_editor) != 1:
            raise VocabularyError("add access: change 0 or more than 1 rows")

    def remove_access_for_user(self, vocab_id: uuid.UUID, user_id: uuid.UUID) -> None:
        query = "DELETE FROM vocabulary_users_access where vocab_id=$1 AND subscriber_id=$2;"
        if self._execute(query, vocab_id, user_id) != 1:
            raise VocabularyError("remove access: change 0 or more than 1 rows")

    def get_editable(self, vocab_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Return whether the user may edit the vocabulary; NoRowsError if no grant."""
        query = "SELECT editor FROM vocabulary_users_access WHERE vocab_id=$1 AND subscriber_id=$2;"
        (is_editor,) = self._fetch_one(query, vocab_id, user_id)
        return bool(is_editor)