"""Resolve old_string against document content and apply the replacement.

Strategies come from edit_match and run in fixed order. The first candidate
whose text occurs exactly once (or at least once with replace_all) decides the
edit; candidates occurring more than once are ambiguous and skipped.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .edit_match import MatchCandidate, iter_candidates
from .utils import dbg, dbg_dump


class SearchReplaceError(Exception):
    """Validation or matching failure for find-and-replace."""

    code = "search_replace_error"


class InvalidInputError(SearchReplaceError):
    code = "invalid_input"


class NotFoundError(SearchReplaceError):
    code = "not_found"


class AmbiguousMatchError(SearchReplaceError):
    code = "ambiguous_match"


SAME_STRINGS_MESSAGE = "old_string and new_string must be different"
NOT_FOUND_MESSAGE = "old_string not found in content"
AMBIGUOUS_MESSAGE = (
    "Found multiple matches for old_string. "
    "Provide more surrounding lines in old_string to identify the correct match."
)


class MatchStatus(Enum):
    UNIQUE = "unique"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"


@dataclass
class MatchResult:
    status: MatchStatus
    candidate: Optional[MatchCandidate] = None
    offset: Optional[int] = None


def validate_single_edit(
    old_string: Any,
    new_string: Any,
    replace_all: Any = None,
    index: Optional[int] = None,
) -> Tuple[str, str, bool]:
    """Validate a single edit. Returns (old_string, new_string, replace_all)."""
    ctx = f"edit at index {index}: " if index is not None else ""
    if old_string is None or not isinstance(old_string, str):
        raise InvalidInputError(f"{ctx}old_string is required")
    if new_string is None or not isinstance(new_string, str):
        raise InvalidInputError(f"{ctx}new_string is required")
    if old_string == new_string:
        raise InvalidInputError(f"{ctx}{SAME_STRINGS_MESSAGE}")
    if replace_all is not None and not isinstance(replace_all, bool):
        raise InvalidInputError(f"{ctx}replace_all must be a valid boolean")
    return (old_string, new_string, bool(replace_all))


def splice_replacement(content: str, offset: int, length: int, replacement: str) -> str:
    """content with content[offset:offset + length] replaced."""
    return content[:offset] + replacement + content[offset + length :]


def substitute_all(content: str, target: str, replacement: str) -> str:
    """Literal, non-overlapping substitution of every occurrence of target."""
    return content.replace(target, replacement)


def resolve_match(content: str, old_string: str, replace_all: bool = False) -> MatchResult:
    """Run the strategy cascade and decide which region (if any) an edit targets.

    With replace_all, the first candidate occurring at all is UNIQUE: its text
    is the substitution target. Without it, a candidate is UNIQUE only when no
    second occurrence starts after its first one.
    """
    found = False
    for candidate in iter_candidates(content, old_string):
        index = content.find(candidate.text)
        if index == -1:
            continue
        found = True
        if replace_all or content.find(candidate.text, index + 1) == -1:
            return MatchResult(MatchStatus.UNIQUE, candidate=candidate, offset=index)
        dbg(
            f"search_replace: {candidate.strategy} candidate at lines "
            f"{candidate.start_line}-{candidate.end_line} is ambiguous"
        )
    if found:
        return MatchResult(MatchStatus.AMBIGUOUS)
    return MatchResult(MatchStatus.NOT_FOUND)


def execute_find_and_replace(
    file_content: str,
    old_string: str,
    new_string: str,
    replace_all: bool = False,
) -> str:
    """Replace old_string (exactly or approximately located) with new_string.

    Raises InvalidInputError, NotFoundError or AmbiguousMatchError; the content
    is never partially modified.
    """
    if old_string == new_string:
        raise InvalidInputError(SAME_STRINGS_MESSAGE)

    result = resolve_match(file_content, old_string, replace_all=replace_all)
    if result.status is MatchStatus.NOT_FOUND:
        dbg_dump("search_replace: not found", old_string)
        raise NotFoundError(NOT_FOUND_MESSAGE)
    if result.status is MatchStatus.AMBIGUOUS:
        raise AmbiguousMatchError(AMBIGUOUS_MESSAGE)

    candidate = result.candidate
    dbg(
        f"search_replace: {candidate.strategy} match at lines "
        f"{candidate.start_line}-{candidate.end_line} replace_all={replace_all}"
    )
    if replace_all:
        return substitute_all(file_content, candidate.text, new_string)
    return splice_replacement(file_content, result.offset, len(candidate.text), new_string)


def execute_multi_find_and_replace(
    file_content: str,
    edits: List[Dict[str, Any]],
) -> str:
    """Apply a list of edits in sequence; any failure aborts the whole batch."""
    result = file_content
    for i, edit in enumerate(edits):
        old_s, new_s, replace_all = validate_single_edit(
            edit.get("old_string"),
            edit.get("new_string"),
            edit.get("replace_all"),
            index=i,
        )
        try:
            result = execute_find_and_replace(result, old_s, new_s, replace_all=replace_all)
        except SearchReplaceError as e:
            raise type(e)(f"edit at index {i}: {e}") from e
    return result
