"""Turn a user-typed name into a safe ``<stem>.md`` filename.

This is a strict allow-list, not a slugifier: anything outside it is
rejected rather than rewritten.
"""

_MARKDOWN_SUFFIXES = (".markdown", ".md")
_ALLOWED_PUNCTUATION = frozenset("-_.")


class InvalidFilename(ValueError):
    pass


def stem_violation(stem: str) -> str | None:
    """Return the rule ``stem`` breaks, or None when it is acceptable."""
    if not stem:
        return "Filename must not be empty"
    if not stem.isascii():
        return "Filename must use only ASCII characters"
    if stem.startswith(".") or stem.endswith("."):
        return "Filename must not start or end with '.'"
    if ".." in stem:
        return "Filename must not contain '..'"
    if not all(ch.isalnum() or ch in _ALLOWED_PUNCTUATION for ch in stem):
        return "Filename must use only ASCII letters, numbers, '-', '_', or '.'"
    return None


def is_safe_stem(stem: str) -> bool:
    return stem_violation(stem) is None


def normalize_markdown_filename(filename: str) -> str:
    trimmed = filename.strip()
    if not trimmed:
        raise InvalidFilename("Filename is required")

    stem = trimmed
    lower = stem.lower()
    for suffix in _MARKDOWN_SUFFIXES:
        if lower.endswith(suffix):
            stem = stem[: -len(suffix)]
            break
    stem = stem.strip()

    problem = stem_violation(stem)
    if problem:
        raise InvalidFilename(problem)

    return f"{stem}.md"
