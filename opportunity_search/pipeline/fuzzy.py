"""Levenshtein edit distance for typo-tolerant matching."""


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum single-character insertions, deletions or substitutions turning a into b."""
    rows, cols = len(a) + 1, len(b) + 1
    table = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            if a[i - 1] == b[j - 1]:
                table[i][j] = table[i - 1][j - 1]
            else:
                table[i][j] = 1 + min(
                    table[i - 1][j],      # delete
                    table[i][j - 1],      # insert
                    table[i - 1][j - 1],  # substitute
                )

    return table[-1][-1]


def fuzzy_distance(word: str, token: str) -> int | None:
    """Return the edit distance when token is a near miss for word, else None.

    A near miss differs by at least one edit and at most a third of the word length.
    """
    if not token:
        return None
    distance = levenshtein_distance(word, token)
    if 0 < distance <= len(word) // 3:
        return distance
    return None
