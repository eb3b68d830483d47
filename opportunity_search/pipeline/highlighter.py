"""Mark query matches inside display text.

The phrase pass runs first, then every word independently, so characters
already wrapped by the phrase may be wrapped again. The double marking is
part of the output format.
"""

import re

DEFAULT_MARKER = "**"


def highlight(
    text: str | None,
    query: str | None,
    query_words: list[str],
    marker: str = DEFAULT_MARKER,
    min_word_length: int = 2,
) -> str | None:
    """Wrap case-insensitive occurrences of query and its words in marker pairs."""
    if not text or not query:
        return text

    highlighted = text

    def replacement(match: re.Match[str]) -> str:
        return f"{marker}{match.group(1)}{marker}"

    if query.lower() in text.lower():
        pattern = re.compile(f"({re.escape(query)})", re.IGNORECASE)
        highlighted = pattern.sub(replacement, highlighted)

    for word in query_words:
        if len(word) < min_word_length:
            continue
        pattern = re.compile(f"({re.escape(word)})", re.IGNORECASE)
        highlighted = pattern.sub(replacement, highlighted)

    return highlighted
