"""Match strategies for locating an old_string region inside document content.

Strategies, in priority order: exact, line_trimmed, block_anchor, multi_occurrence.
Each one returns MatchCandidates whose text is sliced from the original content,
so splicing a candidate back reproduces the content exactly.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from .similarity import line_similarity
from .utils import dbg

# Similarity thresholds for block anchor matching
SINGLE_CANDIDATE_SIMILARITY_THRESHOLD = 0.0
MULTIPLE_CANDIDATES_SIMILARITY_THRESHOLD = 0.3


@dataclass(frozen=True)
class MatchCandidate:
    text: str
    start_line: int  # 1-indexed
    end_line: int  # 1-indexed, inclusive
    strategy: str = ""


def split_lines(text: str) -> List[str]:
    """Split on "\\n" only; a trailing terminator yields a trailing empty line."""
    return text.split("\n")


def trim_line(line: str) -> str:
    # ASCII whitespace only; non-breaking and ideographic spaces are content.
    return line.strip(" \t\n\r\f\v")


def _drop_trailing_empty_line(lines: List[str]) -> List[str]:
    if lines and lines[-1] == "":
        return lines[:-1]
    return lines


def _line_starts(lines: List[str]) -> List[int]:
    """Offset of the first character of every line."""
    starts = []
    offset = 0
    for line in lines:
        starts.append(offset)
        offset += len(line) + 1
    return starts


def extract_line_range(
    lines: List[str],
    line_starts: List[int],
    content: str,
    start_line: int,
    end_line: int,
) -> str:
    """Exact slice of content covering lines start_line..end_line (1-indexed, inclusive).

    Internal terminators are kept; the terminator after end_line is not.
    """
    begin = line_starts[start_line - 1]
    end = line_starts[end_line - 1] + len(lines[end_line - 1])
    return content[begin:end]


def _literal_candidate(content: str, index: int, pattern: str, strategy: str) -> MatchCandidate:
    start_line = content.count("\n", 0, index) + 1
    return MatchCandidate(
        text=pattern,
        start_line=start_line,
        end_line=start_line + pattern.count("\n"),
        strategy=strategy,
    )


def exact_match(content: str, pattern: str) -> List[MatchCandidate]:
    """The pattern itself, when it occurs literally anywhere in content."""
    idx = content.find(pattern)
    if idx == -1:
        return []
    return [_literal_candidate(content, idx, pattern, "exact")]


def line_trimmed_match(content: str, pattern: str) -> List[MatchCandidate]:
    """Windows of content lines equal to the pattern lines once both are stripped."""
    content_lines = split_lines(content)
    search_lines = _drop_trailing_empty_line(split_lines(pattern))
    if not search_lines:
        return []
    trimmed_search = [trim_line(line) for line in search_lines]
    trimmed_content = [trim_line(line) for line in content_lines]
    line_starts = _line_starts(content_lines)
    size = len(search_lines)

    results: List[MatchCandidate] = []
    for i in range(len(content_lines) - size + 1):
        if trimmed_content[i : i + size] != trimmed_search:
            continue
        start_line, end_line = i + 1, i + size
        results.append(
            MatchCandidate(
                text=extract_line_range(content_lines, line_starts, content, start_line, end_line),
                start_line=start_line,
                end_line=end_line,
                strategy="line_trimmed",
            )
        )
    return results


def block_similarity(
    content_lines: List[str],
    search_lines: List[str],
    start_line: int,
    end_line: int,
) -> float:
    """Average similarity of interior lines (anchors excluded) of a candidate block."""
    lines_to_check = min(len(search_lines) - 2, end_line - start_line + 1 - 2)
    if lines_to_check <= 0:
        return 1.0

    total = 0.0
    for j in range(1, lines_to_check + 1):
        score = line_similarity(
            trim_line(content_lines[start_line - 1 + j]),
            trim_line(search_lines[j]),
        )
        if score is not None:
            total += score
    return total / lines_to_check


def _anchor_candidates(
    trimmed_content: List[str],
    first: str,
    last: str,
) -> List[Tuple[int, int]]:
    """(start_line, end_line) pairs, taking only the nearest closing anchor per opener.

    The closing anchor is searched from two lines below the opener, so every
    block has at least one interior line.
    """
    candidates: List[Tuple[int, int]] = []
    total = len(trimmed_content)
    for i in range(total):
        if trimmed_content[i] != first:
            continue
        for j in range(i + 2, total):
            if trimmed_content[j] == last:
                candidates.append((i + 1, j + 1))
                break
    return candidates


def block_anchor_match(content: str, pattern: str) -> List[MatchCandidate]:
    """Blocks bounded by the pattern's first and last lines, scored on interior lines."""
    search_lines = _drop_trailing_empty_line(split_lines(pattern))
    if len(search_lines) < 3:
        return []

    content_lines = split_lines(content)
    trimmed_content = [trim_line(line) for line in content_lines]
    candidates = _anchor_candidates(
        trimmed_content,
        trim_line(search_lines[0]),
        trim_line(search_lines[-1]),
    )
    if not candidates:
        return []

    if len(candidates) == 1:
        threshold = SINGLE_CANDIDATE_SIMILARITY_THRESHOLD
    else:
        threshold = MULTIPLE_CANDIDATES_SIMILARITY_THRESHOLD

    best: Optional[Tuple[int, int]] = None
    max_similarity = -1.0
    for start_line, end_line in candidates:
        similarity = block_similarity(content_lines, search_lines, start_line, end_line)
        if similarity > max_similarity:
            max_similarity = similarity
            best = (start_line, end_line)

    dbg(
        f"block_anchor: {len(candidates)} candidate(s), best={best} "
        f"similarity={max_similarity:.3f} threshold={threshold}"
    )
    if best is None or max_similarity < threshold:
        return []

    start_line, end_line = best
    line_starts = _line_starts(content_lines)
    return [
        MatchCandidate(
            text=extract_line_range(content_lines, line_starts, content, start_line, end_line),
            start_line=start_line,
            end_line=end_line,
            strategy="block_anchor",
        )
    ]


def multi_occurrence_match(content: str, pattern: str) -> List[MatchCandidate]:
    """One candidate per non-overlapping literal occurrence of the pattern."""
    if not pattern:
        return []
    results: List[MatchCandidate] = []
    start = 0
    while True:
        idx = content.find(pattern, start)
        if idx == -1:
            break
        results.append(_literal_candidate(content, idx, pattern, "multi_occurrence"))
        start = idx + len(pattern)
    return results


# Order matters: the coordinator stops at the first decisive candidate.
_MATCH_STRATEGIES: List[Tuple[str, Callable[[str, str], List[MatchCandidate]]]] = [
    ("exact", exact_match),
    ("line_trimmed", line_trimmed_match),
    ("block_anchor", block_anchor_match),
    ("multi_occurrence", multi_occurrence_match),
]


def iter_candidates(content: str, pattern: str) -> Iterator[MatchCandidate]:
    """Yield candidates from every strategy in priority order.

    Lazy, so later strategies only run when earlier ones were not decisive.
    """
    for name, strategy in _MATCH_STRATEGIES:
        matches = strategy(content, pattern)
        if matches:
            dbg(f"edit_match: {name} produced {len(matches)} candidate(s)")
        for candidate in matches:
            yield candidate
