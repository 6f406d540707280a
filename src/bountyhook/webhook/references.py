"""Extraction of closing issue references from pull request text.

A pull request claims a bounty by referencing the issue with one of
GitHub's closing keywords, e.g. "Fixes #42". The patterns are tried in a
fixed order over the body first and then the title; consumers take the
first number produced, so the order decides which reference wins.
"""

import re
from typing import Iterator, Optional, Pattern, Tuple

# Issue numbers are stored as signed 32-bit integers
MAX_ISSUE_NUMBER = 2**31 - 1

_FLAGS = re.IGNORECASE | re.ASCII

KEYWORD_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("close", re.compile(r"close:?\s+#(\d+)", _FLAGS)),
    ("closes", re.compile(r"closes:?\s+#(\d+)", _FLAGS)),
    ("closed", re.compile(r"closed:?\s+#(\d+)", _FLAGS)),
    ("fix", re.compile(r"fix:?\s+#(\d+)", _FLAGS)),
    ("fixes", re.compile(r"fixes:?\s+#(\d+)", _FLAGS)),
    ("fixed", re.compile(r"fixed:?\s+#(\d+)", _FLAGS)),
    # "resolve" also accepts no whitespace before the reference
    ("resolve", re.compile(r"resolve:?\s?#(\d+)", _FLAGS)),
    ("resolves", re.compile(r"resolves:?\s+#(\d+)", _FLAGS)),
    ("resolved", re.compile(r"resolved:?\s+#(\d+)", _FLAGS)),
)


def parse_issue_number(capture: str) -> Optional[int]:
    """Convert a captured digit run to an issue number.

    Returns None for zero and for values outside the signed 32-bit range.
    """
    try:
        number = int(capture)
    except ValueError:
        return None
    if number <= 0 or number > MAX_ISSUE_NUMBER:
        return None
    return number


def _extract(text: Optional[str]) -> Iterator[int]:
    if not text:
        return
    for _verb, pattern in KEYWORD_PATTERNS:
        for match in pattern.finditer(text):
            number = parse_issue_number(match.group(1))
            if number is not None:
                yield number


def extract_issue_numbers(
    body: Optional[str],
    title: Optional[str],
) -> Iterator[int]:
    """Yield candidate issue numbers referenced by a pull request.

    All body matches come first, in pattern order, followed by all title
    matches. The sequence may contain duplicates.

    Args:
        body: Pull request body, may be None.
        title: Pull request title, may be None.

    Yields:
        Positive issue numbers.
    """
    yield from _extract(body)
    yield from _extract(title)


def first_issue_number(body: Optional[str], title: Optional[str]) -> Optional[int]:
    """Return the first candidate from extract_issue_numbers, or None."""
    return next(extract_issue_numbers(body, title), None)
