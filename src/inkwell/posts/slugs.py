"""Slug normalization, unique-slug resolution, and excerpt derivation.

``resolve_unique_slug`` checks candidates against the document store one
at a time.  The check and the later insert are separate round trips, so
two submissions of the same title can both see a slug as free; the
store's own unique constraint (if any) is the final authority and callers
must expect an insert to fail with a duplicate key.
"""

from __future__ import annotations

import functools
import logging
import re
import string
import time
from collections.abc import Callable

from inkwell.config import HANGUL_SYLLABLES
from inkwell.errors import StoreError
from inkwell.store.base import POSTS, DocumentStore, Predicate

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
FALLBACK_SLUG = "post"
EXCERPT_LENGTH = 150

_BASE36_DIGITS = string.digits + string.ascii_lowercase
_HYPHEN_RUN_RE = re.compile(r"-+")
_MARKUP_RE = re.compile(r"[#*`]")
_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_WHITESPACE_RE = re.compile(r"\s+")


@functools.lru_cache(maxsize=8)
def _disallowed_re(extra_letters: str) -> re.Pattern[str]:
    return re.compile(f"[^a-z0-9{extra_letters}]")


def normalize_slug(title: str, extra_letters: str = HANGUL_SYLLABLES) -> str:
    """Turn a title into a URL-safe slug.

    Lower-cases, replaces anything outside ``a-z0-9`` and ``extra_letters``
    with a hyphen, collapses hyphen runs, and strips edge hyphens.
    Idempotent: ``normalize_slug(normalize_slug(t)) == normalize_slug(t)``.
    """
    slug = _disallowed_re(extra_letters).sub("-", title.lower())
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("base36 encoding needs a non-negative integer")
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def _slug_taken(store: DocumentStore, slug: str, publish: bool) -> bool:
    equals: dict[str, object] = {"slug": slug}
    if publish:
        equals["published"] = True
    return store.exists(POSTS, Predicate(equals=equals))


def resolve_unique_slug(
    store: DocumentStore,
    title: str,
    publish: bool,
    *,
    extra_letters: str = HANGUL_SYLLABLES,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    clock: Callable[[], float] = time.time,
) -> str:
    """Resolve a slug for ``title`` that no existing post uses.

    Tries the normalized title, then ``base-1`` through ``base-<max_attempts>``.
    When ``publish`` is set only published posts count as collisions.
    If every numbered candidate is taken, returns ``base-<base36 ms timestamp>``
    without another round trip.

    A failed existence check is logged and the current candidate is
    returned as-is.
    """
    base = normalize_slug(title, extra_letters) or FALLBACK_SLUG
    candidates = [base] + [f"{base}-{n}" for n in range(1, max_attempts + 1)]

    for candidate in candidates:
        try:
            taken = _slug_taken(store, candidate, publish)
        except StoreError as exc:
            logger.warning("Slug existence check failed for %r, using it anyway: %s", candidate, exc)
            return candidate
        if not taken:
            return candidate

    suffix = to_base36(int(clock() * 1000))
    logger.info("All %d numbered slugs for %r taken, using timestamp suffix", max_attempts, base)
    return f"{base}-{suffix}"


def extract_excerpt(content: str, length: int = EXCERPT_LENGTH) -> str:
    """Plain-text preview of a markdown body.

    Drops ``#``, ``*`` and backticks, keeps only the text of ``[text](url)``
    links, and collapses whitespace.  Appends ``...`` only when the text
    was actually cut.
    """
    text = _MARKUP_RE.sub("", content)
    text = _LINK_RE.sub(r"\1", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    if len(text) <= length:
        return text
    return text[:length] + "..."
