"""Operations on the words of a vocabulary at the service level."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from linguaevo.entity import DictWord, Example, VocabWord, VocabWordData


class EventType(str, Enum):
    """Kinds of events raised when the words of a vocabulary change."""

    VOCAB_WORD_CREATED = "vocab_word_created"
    VOCAB_WORD_UPDATED = "vocab_word_updated"
    VOCAB_WORD_RENAMED = "vocab_word_renamed"
    VOCAB_WORD_DELETED = "vocab_word_deleted"


@dataclass(frozen=True)
class WordEvent:
    """An event about a word of a vocabulary, sent to the events service."""

    user_id: uuid.UUID
    type: EventType
    dict_word_id: uuid.UUID
    dict_word: str
    vocab_id: uuid.UUID
    vocab_title: str


class WordServiceMixin:
    """Word operations.

    Expects ``self._repo``, ``self._transactor`` (whose ``transaction()`` is a
    context manager), ``self._dict_svc`` with ``get_or_add_words(words)``,
    ``self._example_svc`` with ``add_examples(examples, lang_code)``,
    ``self._events_svc`` with ``async_add_event(event)``, and the methods
    ``get_vocabulary(uid, vid)`` and ``get_access_for_user(uid, vid)``.
    """

    _repo: Any
    _transactor: Any
    _dict_svc: Any
    _example_svc: Any
    _events_svc: Any

    def _emit(
        self,
        uid: uuid.UUID,
        event_type: EventType,
        dict_word_id: uuid.UUID,
        dict_word: str,
        vocab_id: uuid.UUID,
        vocab_title: str,
    ) -> None:
        self._events_svc.async_add_event(
            WordEvent(
                user_id=uid,
                type=event_type,
                dict_word_id=dict_word_id,
                dict_word=dict_word,
                vocab_id=vocab_id,
                vocab_title=vocab_title,
            )
        )

    def _translate_ids(self, translates: list[DictWord], lang_code: str, creator: uuid.UUID) -> list[uuid.UUID]:
        words = [DictWord(text=tr.text, lang_code=lang_code, creator=creator) for tr in translates]
        return [word.id for word in self._dict_svc.get_or_add_words(words)]

    def _example_ids(self, examples: list[Example], lang_code: str) -> list[uuid.UUID]:
        return list(
            self._example_svc.add_examples([Example(text=ex.text) for ex in examples], lang_code)
        )

    def add_word(self, uid: uuid.UUID, vocab_word_data: VocabWordData) -> VocabWord:
        """Add a word to a vocabulary the user may access and return it."""
        vocab = self.get_vocabulary(uid, vocab_word_data.vocab_id)
        native = DictWord(
            id=vocab_word_data.native.id,
            text=vocab_word_data.native.text,
            pronunciation=vocab_word_data.native.pronunciation,
            lang_code=vocab.native_lang,
            creator=vocab.user_id,
        )

        with self._transactor.transaction():
            native_word_id = self._dict_svc.get_or_add_words([native])[0].id
            translate_ids = self._translate_ids(
                vocab_word_data.translates, vocab.translate_lang, vocab.user_id
            )
            example_ids = self._example_ids(vocab_word_data.examples, vocab.native_lang)
            word_id = self._repo.add_word(
                VocabWord(
                    vocab_id=vocab_word_data.vocab_id,
                    native_id=native_word_id,
                    pronunciation=native.pronunciation,
                    definition=vocab_word_data.definition,
                    translate_ids=translate_ids,
                    example_ids=example_ids,
                )
            )

        now = datetime.now(timezone.utc)
        word = VocabWord(
            id=word_id,
            vocab_id=vocab_word_data.vocab_id,
            native_id=native_word_id,
            created_at=now,
            updated_at=now,
        )
        self._emit(
            uid,
            EventType.VOCAB_WORD_CREATED,
            native_word_id,
            native.text,
            vocab_word_data.vocab_id,
            vocab.name,
        )
        return word

    def update_word_text(self, uid: uuid.UUID, vocab_word_data: VocabWordData) -> VocabWord:
        """Point the word at a (possibly new) dictionary entry for its text."""
        vocab = self.get_vocabulary(uid, vocab_word_data.vocab_id)
        native = DictWord(
            id=vocab_word_data.native.id,
            text=vocab_word_data.native.text,
            pronunciation=vocab_word_data.native.pronunciation,
            lang_code=vocab.native_lang,
            creator=vocab.user_id,
        )
        native_word_id = self._dict_svc.get_or_add_words([native])[0].id

        word = VocabWord(
            id=vocab_word_data.id,
            vocab_id=vocab_word_data.vocab_id,
            native_id=native_word_id,
        )
        self._repo.update_word_text(word)

        event_type = (
            EventType.VOCAB_WORD_UPDATED
            if native.id == native_word_id
            else EventType.VOCAB_WORD_RENAMED
        )
        self._emit(uid, event_type, native_word_id, native.text, word.vocab_id, vocab.name)
        return word

    def update_word_pronunciation(self, uid: uuid.UUID, vocab_word_data: VocabWordData) -> VocabWord:
        vocab = self.get_vocabulary(uid, vocab_word_data.vocab_id)
        word = VocabWord(
            id=vocab_word_data.id,
            vocab_id=vocab_word_data.vocab_id,
            pronunciation=vocab_word_data.native.pronunciation,
        )
        self._repo.update_word_pronunciation(word)
        self._emit(
            uid,
            EventType.VOCAB_WORD_UPDATED,
            vocab_word_data.native.id,
            vocab_word_data.native.text,
            word.vocab_id,
            vocab.name,
        )
        return word

    def _emit_updated_from_store(self, uid: uuid.UUID, word: VocabWord, vocab: Any) -> None:
        stored = self._repo.get_word(word.id, vocab.native_lang, vocab.translate_lang)
        self._emit(
            uid,
            EventType.VOCAB_WORD_UPDATED,
            stored.native.id,
            stored.native.text,
            word.vocab_id,
            vocab.name,
        )

    def update_word_definition(self, uid: uuid.UUID, vocab_word_data: VocabWordData) -> VocabWord:
        vocab = self.get_vocabulary(uid, vocab_word_data.vocab_id)
        word = VocabWord(
            id=vocab_word_data.id,
            vocab_id=vocab_word_data.vocab_id,
            definition=vocab_word_data.definition,
        )
        self._repo.update_word_definition(word)
        self._emit_updated_from_store(uid, word, vocab)
        return word

    def update_word_translates(self, uid: uuid.UUID, vocab_word_data: VocabWordData) -> VocabWord:
        vocab = self.get_vocabulary(uid, vocab_word_data.vocab_id)
        word = VocabWord(
            id=vocab_word_data.id,
            vocab_id=vocab_word_data.vocab_id,
            translate_ids=self._translate_ids(
                vocab_word_data.translates, vocab.translate_lang, vocab.user_id
            ),
        )
        self._repo.update_word_translates(word)
        self._emit_updated_from_store(uid, word, vocab)
        return word

    def update_word_examples(self, uid: uuid.UUID, vocab_word_data: VocabWordData) -> VocabWord:
        vocab = self.get_vocabulary(uid, vocab_word_data.vocab_id)
        word = VocabWord(
            id=vocab_word_data.id,
            vocab_id=vocab_word_data.vocab_id,
            example_ids=self._example_ids(vocab_word_data.examples, vocab.native_lang),
        )
        self._repo.update_word_examples(word)
        self._emit_updated_from_store(uid, word, vocab)
        return word

    def delete_word(self, uid: uuid.UUID, vid: uuid.UUID, wid: uuid.UUID) -> None:
        stored = self.get_word(vid, wid)
        vocab = self.get_vocabulary(uid, vid)
        self._repo.delete_word(VocabWord(id=wid, vocab_id=vid))
        self._emit(
            uid,
            EventType.VOCAB_WORD_DELETED,
            stored.native.id,
            stored.native.text,
            vid,
            vocab.name,
        )

    def get_random_words(self, vid: uuid.UUID, limit: int) -> list[VocabWordData]:
        return list(self._repo.get_random_vocabulary(vid, limit))

    def get_word(self, vid: uuid.UUID, wid: uuid.UUID) -> VocabWordData:
        vocab = self._repo.get_vocab(vid)
        return self._repo.get_word(wid, vocab.native_lang, vocab.translate_lang)

    def get_words(self, uid: uuid.UUID, vid: uuid.UUID) -> list[VocabWordData]:
        self.get_access_for_user(uid, vid)
        return list(self._repo.get_vocab_words(vid))

    def get_several_words(self, uid: uuid.UUID, vid: uuid.UUID, count: int) -> list[VocabWordData]:
        self.get_access_for_user(uid, vid)
        vocab = self._repo.get_vocab(vid)
        return list(
            self._repo.get_vocab_several_words(vid, count, vocab.native_lang, vocab.translate_lang)
        )

    def copy_words(self, vid: uuid.UUID, copy_vid: uuid.UUID) -> None:
        """Add every word of one vocabulary to another."""
        for word in self._repo.get_vocab_words(vid):
            self._repo.add_word(
                VocabWord(
                    vocab_id=copy_vid,
                    native_id=word.native.id,
                    pronunciation=word.native.pronunciation,
                    translate_ids=[tr.id for tr in word.translates],
                    example_ids=[ex.id for ex in word.examples],
                )
            )