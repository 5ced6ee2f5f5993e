"""Per-user access to vocabularies at the service level."""

from __future__ import annotations

import uuid
from typing import Any

from linguaevo.entity import Access, NoRowsError
from linguaevo.runtime import AccessStatus


class AccessServiceMixin:
    """Access operations; expects the repository in ``self._repo``."""

    _repo: Any

    def vocabulary_editable(self, uid: uuid.UUID, vid: uuid.UUID) -> bool:
        """Return whether the user was granted editing; False when nothing was granted."""
        try:
            return self._repo.get_editable(vid, uid)
        except NoRowsError:
            return False

    def add_access_for_user(self, access: Access) -> None:
        self._repo.add_access_for_user(
            access.vocab_id, access.user_id, access.status == AccessStatus.EDIT
        )

    def remove_access_for_user(self, access: Access) -> None:
        self._repo.remove_access_for_user(access.vocab_id, access.user_id)

    def update_access_for_user(self, access: Access) -> None:
        """Replace the user's grant with one of the given status."""
        self.remove_access_for_user(access)
        self.add_access_for_user(access)