"""Roles, access levels and small helpers shared across the application."""

from __future__ import annotations

import random
import re
import string
from enum import Enum, IntEnum

EMPTY_STRING = ""
EMPTY_JSON = "{}"

_NICKNAME_LENGTH = 7
_NICKNAME_CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits

_SUPPORTED_LANGUAGES = ("en", "ru", "fi")
_DEFAULT_LANGUAGE = "en"
_TAG_RE = re.compile(r"[A-Za-z]{2,3}(?:-[A-Za-z0-9]{1,8})*")


class Role(str, Enum):
    """Role of a user in the system."""

    USER = "user"
    GUEST = "guest"
    ADMIN = "admin"

    def is_admin(self) -> bool:
        return self is Role.ADMIN


class AccessType(IntEnum):
    """Who may see a vocabulary."""

    PRIVATE = 0
    SUBSCRIBERS = 1
    PUBLIC = 2


class AccessStatus(IntEnum):
    """What a particular user may do with a vocabulary."""

    FORBIDDEN = 0
    READ = 1
    EDIT = 2


def generate_nickname() -> str:
    """Return a random alphanumeric nickname of seven characters."""
    rng = random.SystemRandom()
    return "".join(rng.choice(_NICKNAME_CHARSET) for _ in range(_NICKNAME_LENGTH))


def _region_of(subtags: list[str]) -> str | None:
    for subtag in subtags:
        if (len(subtag) == 2 and subtag.isalpha()) or (len(subtag) == 3 and subtag.isdigit()):
            return subtag.upper()
    return None


def get_language(lang: str) -> str:
    """Match a BCP 47 language tag against the supported languages.

    Raises ValueError when the tag is not well formed.
    """
    normalized = lang.replace("_", "-")
    if not _TAG_RE.fullmatch(normalized):
        raise ValueError(f"invalid language tag: {lang!r}")

    language, *rest = normalized.split("-")
    language = language.lower()
    if language not in _SUPPORTED_LANGUAGES:
        return _DEFAULT_LANGUAGE

    region = _region_of(rest)
    if language == "en" and region == "US":
        return "en-US"
    if region is None:
        return language
    return f"{language}-u-rg-{region.lower()}zzzz"