import re


_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9_]")


def category_slug(name: str) -> str:
    """
    Derive a category id from its display name.

    Trimmed, lower-cased, whitespace runs become ``_`` and anything outside
    ``[a-z0-9_]`` is dropped. Names made only of other scripts yield ``""``.
    """
    value = (name or "").strip().lower()
    value = _WHITESPACE_RE.sub("_", value)
    return _DISALLOWED_RE.sub("", value)
