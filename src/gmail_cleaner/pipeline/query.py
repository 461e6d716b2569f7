from __future__ import annotations

import re
from urllib.parse import quote_plus

from gmail_cleaner.errors import ValidationError
from gmail_cleaner.models import FilterSpec

OLDER_THAN_RE = re.compile(r"\A\d+[ymd]\Z")

GMAIL_SEARCH_URL = "https://mail.google.com/mail/#search/"


def validate_filter(spec: FilterSpec) -> None:
    if not spec.label or not spec.label.strip():
        raise ValidationError("argument 'label' is required")
    if '"' in spec.label:
        raise ValidationError("argument 'label' must not contain any double quotes (\")")

    if not spec.older_than:
        raise ValidationError("argument 'older' is required")
    if not OLDER_THAN_RE.match(spec.older_than):
        raise ValidationError("argument 'older' must be of the form '<N>[ymd]' (eg. '1y', '3m', '10d')")

    # The exclude term sits inside -{...}; it must not be able to close that group.
    if "{" in spec.exclude or "}" in spec.exclude:
        raise ValidationError("argument 'exclude' must not contain braces ({})")
    if spec.exclude.count('"') % 2:
        raise ValidationError("argument 'exclude' must not contain unbalanced double quotes (\")")
    if not _parens_balanced(spec.exclude):
        raise ValidationError("argument 'exclude' must not contain unbalanced parentheses (())")


def _parens_balanced(text: str) -> bool:
    depth = 0
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def build_query(spec: FilterSpec) -> str:
    """
    Build the Gmail search string for a cleanup run.
    Example: 'label:"Promotions" older_than:1y -is:starred -{from:boss@example.com}'
    """
    validate_filter(spec)

    query = f'label:"{spec.label}" older_than:{spec.older_than}'
    if spec.skip_starred:
        query += " -is:starred"
    if spec.exclude:
        query += f" -{{{spec.exclude}}}"
    return query


def gmail_search_url(query: str) -> str:
    return GMAIL_SEARCH_URL + quote_plus(query)
