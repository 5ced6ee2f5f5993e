"""Domain objects and errors of the vocabulary service."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from linguaevo.runtime import AccessStatus

NIL_UUID = uuid.UUID(int=0)


class VocabularyError(Exception):
    """Base error of the vocabulary service."""

    default_message = "vocabulary error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class VocabularyNotFoundError(VocabularyError):
    default_message = "vocabulary not found"


class AccessDeniedError(VocabularyError):
    default_message = "access denied"


class DuplicateError(VocabularyError):
    default_message = "duplicate key value violates unique constraint"


class NoRowsError(VocabularyError):
    default_message = "no rows in result set"


@dataclass
class Vocab:
    id: uuid.UUID = NIL_UUID
    user_id: uuid.UUID = NIL_UUID
    name: str = ""
    access: int = 0
    native_lang: str = ""
    translate_lang: str = ""
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class VocabWithUser(Vocab):
    user_name: str = ""
    editable: bool = False
    notification: bool = False
    words_count: int = 0


@dataclass
class VocabWithUserAndWords(VocabWithUser):
    words: list[str] = field(default_factory=list)


@dataclass
class VocabWord:
    id: uuid.UUID = NIL_UUID
    vocab_id: uuid.UUID = NIL_UUID
    native_id: uuid.UUID = NIL_UUID
    pronunciation: str = ""
    definition: str = ""
    translate_ids: list[uuid.UUID] = field(default_factory=list)
    example_ids: list[uuid.UUID] = field(default_factory=list)
    updated_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class DictWord:
    id: uuid.UUID = NIL_UUID
    text: str = ""
    pronunciation: str = ""
    lang_code: str = ""
    creator: uuid.UUID = NIL_UUID


@dataclass
class Example:
    id: uuid.UUID = NIL_UUID
    text: str = ""


@dataclass
class VocabWordData:
    id: uuid.UUID = NIL_UUID
    vocab_id: uuid.UUID = NIL_UUID
    native: DictWord = field(default_factory=DictWord)
    definition: str = ""
    translates: list[DictWord] = field(default_factory=list)
    examples: list[Example] = field(default_factory=list)
    updated_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class Access:
    id: int = 0
    vocab_id: uuid.UUID = NIL_UUID
    user_id: uuid.UUID = NIL_UUID
    status: AccessStatus = AccessStatus.FORBIDDEN