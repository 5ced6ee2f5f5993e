# linguaevo

The core of a language-learning service. It keeps users' vocabularies and the
words in them, decides who may read or edit a vocabulary, and picks
vocabularies to recommend.

The package has no dependencies outside the standard library. All storage goes
through a small `Executor` interface, so any database driver that speaks a
PostgreSQL-style SQL dialect with `$n` placeholders can sit behind it.

## Layout

- `linguaevo.runtime`: roles (`Role`, with `is_admin()`), vocabulary
  visibility (`AccessType`: `PRIVATE`, `SUBSCRIBERS`, `PUBLIC`), per-user
  rights (`AccessStatus`: `FORBIDDEN`, `READ`, `EDIT`),
  `generate_nickname()` (seven random letters and digits) and
  `get_language(lang)`. The last one matches a language tag against English,
  American English, Russian and Finnish, falls back to `"en"` for any other
  language, and raises `ValueError` for a malformed tag.
- `linguaevo.entity`: dataclasses `Vocab`, `VocabWithUser`,
  `VocabWithUserAndWords`, `VocabWord`, `DictWord`, `Example`,
  `VocabWordData` and `Access`, and the errors the package raises:
  `VocabularyNotFoundError`, `AccessDeniedError`, `DuplicateError` and
  `NoRowsError`, all subclasses of `VocabularyError`.
- `linguaevo.repository.common`: the `Executor` protocol (`execute`,
  `fetch_one`, `fetch_all`), `SortType`, `SortOrder`, `RepoBase`, and the
  query helpers `get_sorted`, `get_equal_language`, `get_dict_table` and
  `get_exam_table`.
- `linguaevo.repository.vocab`: `VocabRepo`, which builds and runs the SQL for
  vocabularies. It combines the word queries of
  `linguaevo.repository.word.WordRepoMixin`, the per-user listings of
  `linguaevo.repository.user.UserRepoMixin` and the access grants of
  `linguaevo.repository.access.AccessRepoMixin`.
- `linguaevo.service.core`: `Service`, the business rules on top of the
  repository. It checks access, lists and recommends vocabularies, and copies
  a vocabulary together with its words. Its user operations
  (`linguaevo.service.user`), access grants (`linguaevo.service.access`) and
  word operations (`linguaevo.service.word`, which also defines `EventType`
  and `WordEvent`) live in mixins.

## Access rules

`Service.get_access_for_user(uid, vid)` decides in this order:

1. An anonymous user (the nil UUID) only gets at public vocabularies; any
   other vocabulary raises `AccessDeniedError`.
2. The creator of a vocabulary may edit it.
3. Anyone may read a public vocabulary.
4. A subscriber of the creator may read the vocabulary, or edit it if they
   have been granted edit rights.
5. Everyone else is forbidden.

`Service.get_vocabulary(uid, vid)` raises `AccessDeniedError` unless the user
may at least read.

## Usage sketch

```python
from linguaevo.repository.vocab import VocabRepo
from linguaevo.service.core import Service

repo = VocabRepo(executor)          # executor: your Executor implementation
service = Service(transactor, repo, example_svc, dict_svc, tag_svc,
                  subscribers_svc, events_svc)

vocabs, total = service.get_vocabularies(
    uid, page=1, items_per_page=5, type_sort=1, order=0, search="",
    native_lang="en", translate_lang="ru", limit_words=5,
)
```

The collaborators passed to `Service` are duck-typed:

- `transactor.transaction()` returns a context manager;
- `dict_svc.get_or_add_words(words)` returns dictionary words with their ids;
- `example_svc.add_examples(examples, lang_code)` returns example ids;
- `subscribers_svc.check(uid, sub_id)` tells whether one user follows another;
- `events_svc.async_add_event(event)` receives a `WordEvent`.

Errors are raised as exceptions, never returned. Catch `VocabularyError` to
handle those of the package.

## What the package does not do

It is a library only. It has no HTTP server or request handlers, no command
line, no database driver, connection pool or schema migrations, and no
dictionary, example, subscription or event services of its own: those are
supplied by the caller as described above.