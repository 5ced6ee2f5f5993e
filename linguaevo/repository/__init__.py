"""SQL storage for vocabularies, words and access grants, run through an Executor."""