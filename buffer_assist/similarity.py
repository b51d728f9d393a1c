"""Edit-distance similarity between single lines."""

from typing import Optional


def levenshtein(a: str, b: str) -> int:
    """Minimum single-character insertions, deletions and substitutions turning a into b."""
    if a == "" or b == "":
        return max(len(a), len(b))

    matrix = [[0] * (len(b) + 1) for _ in range(len(a) + 1)]
    for i in range(len(a) + 1):
        matrix[i][0] = i
    for j in range(len(b) + 1):
        matrix[0][j] = j

    for i in range(1, len(a) + 1):
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,
                matrix[i][j - 1] + 1,
                matrix[i - 1][j - 1] + cost,
            )

    return matrix[len(a)][len(b)]


def line_similarity(a: str, b: str) -> Optional[float]:
    """1.0 for identical lines, 0.0 for maximally different ones.

    Returns None when both lines are empty; such a pair carries no signal.
    """
    max_len = max(len(a), len(b))
    if max_len == 0:
        return None
    return 1 - levenshtein(a, b) / max_len
