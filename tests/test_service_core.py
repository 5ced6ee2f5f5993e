import dataclasses
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from linguaevo.entity import (
    NIL_UUID,
    AccessDeniedError,
    DictWord,
    DuplicateError,
    Example,
    NoRowsError,
    Vocab,
    VocabularyError,
    VocabWithUser,
    VocabWord,
    VocabWordData,
)
from linguaevo.runtime import AccessStatus, AccessType
from linguaevo.service.core import Service


class FakeTransactor:
    def __init__(self):
        self.opened = 0

    @contextmanager
    def transaction(self):
        self.opened += 1
        yield


class FakeSubscribers:
    def __init__(self):
        self.pairs = set()

    def subscribe(self, uid, sub_id):
        self.pairs.add((uid, sub_id))

    def check(self, uid, sub_id):
        return (uid, sub_id) in self.pairs


class FakeDictSvc:
    def __init__(self):
        self.words = {}

    def get_or_add_words(self, words):
        result = []
        for word in words:
            found = next(
                (
                    stored
                    for stored in self.words.values()
                    if stored.text == word.text and stored.lang_code == word.lang_code
                ),
                None,
            )
            if found is None:
                found = dataclasses.replace(word, id=uuid.uuid4())
                self.words[found.id] = found
            result.append(found)
        return result


class FakeExampleSvc:
    def add_examples(self, examples, lang_code):
        return [uuid.uuid4() for _ in examples]


class FakeEvents:
    def __init__(self):
        self.events = []

    def async_add_event(self, event):
        self.events.append(event)


class FakeRepo:
    def __init__(self, dictionary, subscribers):
        self.dictionary = dictionary
        self.subscribers = subscribers
        self.vocabs = {}
        self.words = {}
        self.grants = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    def _count_words(self, vid):
        return sum(1 for word in self.words.values() if word.vocab_id == vid)

    def _with_user(self, vocab):
        values = {f.name: getattr(vocab, f.name) for f in dataclasses.fields(Vocab)}
        return VocabWithUser(**values, words_count=self._count_words(vocab.id))

    @staticmethod
    def _matches(vocab, search, native_lang, translate_lang):
        if search not in vocab.name and search not in vocab.description:
            return False
        if native_lang != "any" and vocab.native_lang != native_lang:
            return False
        return translate_lang == "any" or vocab.translate_lang == translate_lang

    @staticmethod
    def _page(vocabs, page, items_per_page, type_sort, order):
        keys = {0: "created_at", 1: "updated_at", 2: "name"}
        if type_sort in keys:
            vocabs = sorted(vocabs, key=lambda v: getattr(v, keys[type_sort]), reverse=order == 1)
        start = (page - 1) * items_per_page
        return vocabs[start:start + items_per_page]

    def add_vocab(self, vocab):
        vid = uuid.uuid4()
        now = self._tick()
        self.vocabs[vid] = dataclasses.replace(vocab, id=vid, created_at=now, updated_at=now)
        return vid

    def get_vocab(self, vid):
        if vid not in self.vocabs:
            raise NoRowsError()
        return dataclasses.replace(self.vocabs[vid])

    def get_access(self, vid):
        return int(self.get_vocab(vid).access)

    def get_creator_vocab(self, vid):
        return self.get_vocab(vid).user_id

    def get_editable(self, vid, uid):
        if (vid, uid) not in self.grants:
            raise NoRowsError()
        return self.grants[(vid, uid)]

    def add_access_for_user(self, vid, uid, is_editor):
        self.grants[(vid, uid)] = is_editor

    def remove_access_for_user(self, vid, uid):
        if self.grants.pop((vid, uid), None) is None:
            raise VocabularyError("change 0 or more than 1 rows")

    def edit_vocab(self, vocab):
        if vocab.id not in self.vocabs:
            raise NoRowsError()
        stored = self.vocabs[vocab.id]
        self.vocabs[vocab.id] = dataclasses.replace(
            stored, name=vocab.name, access=vocab.access, description=vocab.description
        )

    def get_vocabularies_by_user(self, uid):
        return [self._with_user(v) for v in self.vocabs.values() if v.user_id == uid]

    def _by_access(self, uid, access, search, native_lang, translate_lang):
        levels = {int(a) for a in access}
        return [
            self._with_user(v)
            for v in self.vocabs.values()
            if (v.user_id == uid or int(v.access) in levels)
            and self._matches(v, search, native_lang, translate_lang)
        ]

    def get_vocabularies_count_by_access(self, uid, access, search, native_lang, translate_lang):
        return len(self._by_access(uid, access, search, native_lang, translate_lang))

    def get_vocabularies_by_access(
        self, uid, access, page, items_per_page, type_sort, order, search, native_lang, translate_lang
    ):
        vocabs = self._by_access(uid, access, search, native_lang, translate_lang)
        return self._page(vocabs, page, items_per_page, type_sort, order)

    def _by_user(self, uid, access, search, native_lang, translate_lang):
        levels = {int(a) for a in access}
        return [
            self._with_user(v)
            for v in self.vocabs.values()
            if (
                v.user_id == uid
                or (self.subscribers.check(uid, v.user_id) and int(v.access) in levels)
            )
            and self._matches(v, search, native_lang, translate_lang)
        ]

    def get_vocabularies_count_by_user(self, uid, access, search, native_lang, translate_lang):
        return len(self._by_user(uid, access, search, native_lang, translate_lang))

    def get_sorted_vocabularies_by_user(
        self, uid, access, page, items_per_page, type_sort, order, search, native_lang, translate_lang
    ):
        vocabs = self._by_user(uid, access, search, native_lang, translate_lang)
        return self._page(vocabs, page, items_per_page, type_sort, order)

    def add_word(self, word):
        if any(
            w.vocab_id == word.vocab_id and w.native_id == word.native_id
            for w in self.words.values()
        ):
            raise DuplicateError()
        wid = uuid.uuid4()
        now = self._tick()
        self.words[wid] = dataclasses.replace(word, id=wid, created_at=now, updated_at=now)
        return wid

    def _word_data(self, word):
        native = self.dictionary.words.get(word.native_id, DictWord(id=word.native_id))
        return VocabWordData(
            id=word.id,
            vocab_id=word.vocab_id,
            native=DictWord(id=native.id, text=native.text, pronunciation=word.pronunciation),
            definition=word.definition,
            translates=[DictWord(id=tid) for tid in word.translate_ids],
            examples=[Example(id=eid) for eid in word.example_ids],
            created_at=word.created_at,
            updated_at=word.updated_at,
        )

    def get_vocab_words(self, vid):
        return [self._word_data(w) for w in self.words.values() if w.vocab_id == vid]

    def get_vocab_several_words(self, vid, count, native_lang, translate_lang):
        return self.get_vocab_words(vid)[:count]

    def copy_vocab(self, uid, vid):
        return self.add_vocab(dataclasses.replace(self.get_vocab(vid), user_id=uid))

    def get_vocabs_with_count_words(self, uid, owner, access):
        levels = {int(a) for a in access}
        return [
            self._with_user(v)
            for v in self.vocabs.values()
            if v.user_id == owner and int(v.access) in levels
        ]

    def get_with_count_words(self, vid):
        return self._with_user(self.get_vocab(vid))

    def _largest(self, vocabs, limit):
        ranked = [v for v in vocabs if v.words_count > 0]
        ranked.sort(key=lambda v: v.words_count, reverse=True)
        return ranked[:limit]

    def get_vocabularies_with_max_words(self, access, limit):
        levels = {int(a) for a in access}
        vocabs = [self._with_user(v) for v in self.vocabs.values() if int(v.access) in levels]
        return self._largest(vocabs, limit)

    def get_vocabularies_recommended(self, uid, access, limit):
        levels = {int(a) for a in access}
        langs = {v.native_lang for v in self.vocabs.values() if v.user_id == uid}
        vocabs = [
            self._with_user(v)
            for v in self.vocabs.values()
            if int(v.access) in levels and v.native_lang in langs and v.user_id != uid
        ]
        return self._largest(vocabs, limit)


class BrokenWordsRepo(FakeRepo):
    def get_vocab_several_words(self, vid, count, native_lang, translate_lang):
        raise VocabularyError("words unavailable")


def _make_env(repo_class=FakeRepo):
    dictionary = FakeDictSvc()
    subscribers = FakeSubscribers()
    repo = repo_class(dictionary, subscribers)
    events = FakeEvents()
    transactor = FakeTransactor()
    svc = Service(transactor, repo, FakeExampleSvc(), dictionary, None, subscribers, events)
    return SimpleNamespace(
        repo=repo, subscribers=subscribers, events=events, transactor=transactor, svc=svc
    )


@pytest.fixture
def env():
    return _make_env()


def add_vocabs(svc, uid, count, access=1):
    return [
        svc.user_add_vocabulary(
            Vocab(
                user_id=uid,
                name=f"vocab_{j}",
                native_lang="en",
                translate_lang="ru",
                access=access,
            )
        )
        for j in range(count)
    ]


def add_words(svc, uid, vocab, count):
    for i in range(count):
        svc.add_word(
            uid,
            VocabWordData(vocab_id=vocab.id, native=DictWord(text=f"text_{i}_{vocab.name}")),
        )


LIST_ARGS = dict(
    page=1,
    items_per_page=5,
    type_sort=1,
    order=0,
    search="",
    native_lang="en",
    translate_lang="ru",
)


def get_vocabularies(svc, uid, max_words=5):
    return svc.get_vocabularies(uid, limit_words=max_words, **LIST_ARGS)


def test_get_vocabularies_empty(env):
    vocabs, count = get_vocabularies(env.svc, uuid.uuid4())
    assert count == 0
    assert vocabs == []


def test_get_vocabularies_add_4_vocabs(env):
    for _ in range(2):
        add_vocabs(env.svc, uuid.uuid4(), 2)
    vocabs, count = get_vocabularies(env.svc, uuid.uuid4())
    assert count == 4
    assert len(vocabs) == 4


def test_get_vocabularies_add_9_vocabs(env):
    for _ in range(3):
        add_vocabs(env.svc, uuid.uuid4(), 3)
    vocabs, count = get_vocabularies(env.svc, uuid.uuid4())
    assert count == 9
    assert len(vocabs) == 5


def test_get_vocabularies_with_words(env):
    for _ in range(3):
        uid = uuid.uuid4()
        for vocab in add_vocabs(env.svc, uid, 3):
            add_words(env.svc, uid, vocab, 3)
    vocabs, count = get_vocabularies(env.svc, uuid.uuid4())
    assert count == 9
    assert len(vocabs) == 5
    for vocab in vocabs:
        assert vocab.words_count == 3
        assert len(vocab.words) == 3
        assert all(word.endswith(vocab.name) for word in vocab.words)


def test_get_vocabularies_with_words_limited(env):
    for _ in range(3):
        uid = uuid.uuid4()
        for vocab in add_vocabs(env.svc, uid, 3):
            add_words(env.svc, uid, vocab, 10)
    vocabs, count = get_vocabularies(env.svc, uuid.uuid4())
    assert count == 9
    assert len(vocabs) == 5
    for vocab in vocabs:
        assert vocab.words_count == 10
        assert len(vocab.words) == 5


def test_get_vocabularies_keeps_vocab_when_words_fail():
    env = _make_env(BrokenWordsRepo)
    uid = uuid.uuid4()
    (vocab,) = add_vocabs(env.svc, uid, 1)
    add_words(env.svc, uid, vocab, 2)
    vocabs, count = get_vocabularies(env.svc, uuid.uuid4())
    assert count == 1
    assert vocabs[0].words == []
    assert vocabs[0].words_count == 2


def test_user_get_vocabularies_empty(env):
    vocabs, count = env.svc.user_get_vocabularies(uuid.uuid4(), **LIST_ARGS)
    assert count == 0
    assert vocabs == []


def test_user_get_only_own_vocabs(env):
    uid = uuid.uuid4()
    add_vocabs(env.svc, uid, 10)
    vocabs, count = env.svc.user_get_vocabularies(uid, **LIST_ARGS)
    assert count == 10
    assert len(vocabs) == 5


def test_user_get_own_and_subscribed_vocabs(env):
    uid = uuid.uuid4()
    add_vocabs(env.svc, uid, 5)
    for _ in range(3):
        other = uuid.uuid4()
        add_vocabs(env.svc, other, 3)
        env.subscribers.subscribe(uid, other)
    vocabs, count = env.svc.user_get_vocabularies(uid, **LIST_ARGS)
    assert count == 14
    assert len(vocabs) == 5


def test_access_owner_can_edit(env):
    uid = uuid.uuid4()
    (vocab,) = add_vocabs(env.svc, uid, 1, access=AccessType.PRIVATE)
    assert env.svc.get_access_for_user(uid, vocab.id) == AccessStatus.EDIT


def test_access_anonymous_denied_for_non_public(env):
    (vocab,) = add_vocabs(env.svc, uuid.uuid4(), 1, access=AccessType.SUBSCRIBERS)
    with pytest.raises(AccessDeniedError):
        env.svc.get_access_for_user(NIL_UUID, vocab.id)


def test_access_anonymous_reads_public(env):
    (vocab,) = add_vocabs(env.svc, uuid.uuid4(), 1, access=AccessType.PUBLIC)
    assert env.svc.get_access_for_user(NIL_UUID, vocab.id) == AccessStatus.READ


def test_access_stranger_forbidden_for_subscribers_vocab(env):
    (vocab,) = add_vocabs(env.svc, uuid.uuid4(), 1, access=AccessType.SUBSCRIBERS)
    assert env.svc.get_access_for_user(uuid.uuid4(), vocab.id) == AccessStatus.FORBIDDEN


def test_access_subscriber_reads_and_editor_edits(env):
    owner, reader = uuid.uuid4(), uuid.uuid4()
    (vocab,) = add_vocabs(env.svc, owner, 1, access=AccessType.SUBSCRIBERS)
    env.subscribers.subscribe(reader, owner)
    assert env.svc.get_access_for_user(reader, vocab.id) == AccessStatus.READ
    env.repo.add_access_for_user(vocab.id, reader, True)
    assert env.svc.get_access_for_user(reader, vocab.id) == AccessStatus.EDIT


def test_access_unknown_vocab_raises(env):
    with pytest.raises(NoRowsError):
        env.svc.get_access_for_user(uuid.uuid4(), uuid.uuid4())


def test_get_vocabulary_for_owner(env):
    uid = uuid.uuid4()
    (vocab,) = add_vocabs(env.svc, uid, 1)
    assert env.svc.get_vocabulary(uid, vocab.id).name == "vocab_0"


def test_get_vocabulary_forbidden(env):
    (vocab,) = add_vocabs(env.svc, uuid.uuid4(), 1, access=AccessType.SUBSCRIBERS)
    with pytest.raises(AccessDeniedError):
        env.svc.get_vocabulary(uuid.uuid4(), vocab.id)


def test_get_vocabulary_error_becomes_access_denied(env):
    with pytest.raises(AccessDeniedError):
        env.svc.get_vocabulary(uuid.uuid4(), uuid.uuid4())


def test_get_vocabulary_info_editable(env):
    owner, editor, stranger = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    (vocab,) = add_vocabs(env.svc, owner, 1)
    add_words(env.svc, owner, vocab, 2)
    env.repo.add_access_for_user(vocab.id, editor, True)

    info = env.svc.get_vocabulary_info(owner, vocab.id)
    assert info.editable is True
    assert info.words_count == 2
    assert env.svc.get_vocabulary_info(editor, vocab.id).editable is True
    assert env.svc.get_vocabulary_info(stranger, vocab.id).editable is False


def test_get_vocabularies_by_user_skips_private(env):
    owner = uuid.uuid4()
    add_vocabs(env.svc, owner, 2, access=AccessType.PUBLIC)
    env.svc.user_add_vocabulary(
        Vocab(user_id=owner, name="hidden", native_lang="en", translate_lang="ru", access=0)
    )
    vocabs = env.svc.get_vocabularies_by_user(
        uuid.uuid4(), owner, [AccessType.PUBLIC, AccessType.SUBSCRIBERS]
    )
    assert sorted(v.name for v in vocabs) == ["vocab_0", "vocab_1"]


def test_copy_vocab_copies_words(env):
    owner, other = uuid.uuid4(), uuid.uuid4()
    (vocab,) = add_vocabs(env.svc, owner, 1)
    add_words(env.svc, owner, vocab, 4)
    env.svc.copy_vocab(other, vocab.id)

    (copy,) = env.repo.get_vocabularies_by_user(other)
    assert copy.name == "vocab_0"
    assert copy.id != vocab.id
    assert copy.words_count == 4


def test_recommended_for_anonymous_orders_by_words(env):
    for size in range(5):
        uid = uuid.uuid4()
        (vocab,) = add_vocabs(env.svc, uid, 1)
        add_words(env.svc, uid, vocab, size)
    vocabs = env.svc.get_recommended_vocabularies(NIL_UUID)
    assert [v.words_count for v in vocabs] == [4, 3, 2]


def test_recommended_for_user_excludes_own_and_other_languages(env):
    uid = uuid.uuid4()
    (own,) = add_vocabs(env.svc, uid, 1)
    add_words(env.svc, uid, own, 9)
    for size in (1, 2):
        other = uuid.uuid4()
        (vocab,) = add_vocabs(env.svc, other, 1)
        add_words(env.svc, other, vocab, size)
    foreign_owner = uuid.uuid4()
    foreign = env.svc.user_add_vocabulary(
        Vocab(user_id=foreign_owner, name="fi", native_lang="fi", translate_lang="ru", access=1)
    )
    add_words(env.svc, foreign_owner, foreign, 7)

    vocabs = env.svc.get_recommended_vocabularies(uid)
    assert [v.words_count for v in vocabs] == [2, 1]
    assert all(v.user_id != uid for v in vocabs)


def test_add_word_emits_event_and_rejects_duplicate(env):
    uid = uuid.uuid4()
    (vocab,) = add_vocabs(env.svc, uid, 1)
    data = VocabWordData(vocab_id=vocab.id, native=DictWord(text="hello"))
    word = env.svc.add_word(uid, data)
    assert word.vocab_id == vocab.id
    assert env.events.events[-1].dict_word == "hello"
    with pytest.raises(DuplicateError):
        env.svc.add_word(uid, data)
    assert isinstance(env.repo.words[word.id], VocabWord)