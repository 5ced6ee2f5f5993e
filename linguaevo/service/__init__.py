"""Business rules for vocabularies, words, access control and word events."""