"""Tests for the individual match strategies."""

import unittest

from buffer_assist.edit_match import (
    block_anchor_match,
    block_similarity,
    exact_match,
    iter_candidates,
    line_trimmed_match,
    multi_occurrence_match,
    split_lines,
)


class TestExactMatch(unittest.TestCase):
    def test_found_with_line_bookkeeping(self):
        (candidate,) = exact_match("a\nb\nc", "b\nc")
        self.assertEqual(candidate.text, "b\nc")
        self.assertEqual((candidate.start_line, candidate.end_line), (2, 3))
        self.assertEqual(candidate.strategy, "exact")

    def test_not_found(self):
        self.assertEqual(exact_match("hello world", "planet"), [])


class TestLineTrimmedMatch(unittest.TestCase):
    def test_ignores_indentation_and_keeps_original_text(self):
        content = "    function test() {\n        console.log('test');\n    }"
        pattern = "function test() {\n  console.log('test');\n}"
        (candidate,) = line_trimmed_match(content, pattern)
        self.assertEqual(candidate.text, content)
        self.assertEqual((candidate.start_line, candidate.end_line), (1, 3))

    def test_trailing_terminator_in_pattern_is_dropped(self):
        content = "a\n  b\nc"
        (candidate,) = line_trimmed_match(content, "a\nb\n")
        self.assertEqual(candidate.text, "a\n  b")

    def test_all_windows_in_document_order(self):
        content = "x\n  y\nz\n\ty  \nw"
        matches = line_trimmed_match(content, "y")
        self.assertEqual([m.text for m in matches], ["  y", "\ty  "])
        self.assertEqual([m.start_line for m in matches], [2, 4])

    def test_candidate_text_is_a_slice_of_content(self):
        content = "one\r\n  two  \r\nthree"
        (candidate,) = line_trimmed_match(content, "two\nthree")
        self.assertIn(candidate.text, content)
        self.assertEqual(candidate.text, "  two  \r\nthree")

    def test_only_ascii_whitespace_is_trimmed(self):
        self.assertEqual(line_trimmed_match("　value\nnext", "value\nnext"), [])
        self.assertEqual(line_trimmed_match("value\xa0\nnext", "value\nnext"), [])
        (candidate,) = line_trimmed_match("\t value \f\nnext", "value\nnext")
        self.assertEqual(candidate.text, "\t value \f\nnext")

    def test_pattern_longer_than_content(self):
        self.assertEqual(line_trimmed_match("a\nb", "a\nb\nc"), [])

    def test_empty_pattern(self):
        self.assertEqual(line_trimmed_match("a\nb", ""), [])


class TestBlockAnchorMatch(unittest.TestCase):
    def test_single_candidate_accepted_despite_low_similarity(self):
        content = "function calc() {\n  let x = 1;\n  let y = 2;\n  return x + y;\n}"
        pattern = "function calc() {\n  totally different\n  stuff here\n  nothing alike\n}"
        (candidate,) = block_anchor_match(content, pattern)
        self.assertEqual(candidate.text, content)
        self.assertEqual(candidate.strategy, "block_anchor")

    def test_best_of_multiple_candidates(self):
        content = "if ok:\n    alpha()\nend\nif ok:\n    beta()\nend"
        (candidate,) = block_anchor_match(content, "if ok:\n    betaa()\nend")
        self.assertEqual(candidate.text, "if ok:\n    beta()\nend")
        self.assertEqual((candidate.start_line, candidate.end_line), (4, 6))

    def test_multiple_candidates_below_threshold(self):
        content = "start\nxxxxxxxx\nstop\nstart\nyyyyyyyy\nstop"
        self.assertEqual(block_anchor_match(content, "start\nabcdefgh\nstop"), [])

    def test_tie_goes_to_earliest_candidate(self):
        content = "s\nAAAB\ne\ns\nAAAC\ne"
        (candidate,) = block_anchor_match(content, "s\nAAAD\ne")
        self.assertEqual((candidate.start_line, candidate.end_line), (1, 3))
        self.assertEqual(candidate.text, "s\nAAAB\ne")

    def test_best_similarity_at_threshold_is_accepted(self):
        same = ["same1", "same2", "same3"]
        pattern = "\n".join(["s"] + same + ["aaaa"] * 7 + ["e"])
        content = "\n".join(["s"] + same + ["bbbb"] * 7 + ["e"] + ["s"] + ["zzzz"] * 10 + ["e"])
        lines = split_lines(content)
        self.assertEqual(block_similarity(lines, split_lines(pattern), 1, 12), 0.3)
        (candidate,) = block_anchor_match(content, pattern)
        self.assertEqual((candidate.start_line, candidate.end_line), (1, 12))

    def test_only_nearest_closing_anchor(self):
        content = "begin\nx\nend\ny\nend"
        (candidate,) = block_anchor_match(content, "begin\nx\ny\nend")
        self.assertEqual(candidate.text, "begin\nx\nend")

    def test_requires_interior_line(self):
        self.assertEqual(block_anchor_match("a\nb\nc", "a\nb"), [])
        # Closing anchor directly below the opener is not a block.
        self.assertEqual(block_anchor_match("open\nclose\nmore", "open\nmid\nclose"), [])

    def test_trailing_terminator_counts_against_minimum(self):
        self.assertEqual(block_anchor_match("a\nx\nb", "a\nb\n"), [])

    def test_no_anchor(self):
        self.assertEqual(block_anchor_match("a\nb\nc\nd", "q\nb\nc\nd"), [])


class TestBlockSimilarity(unittest.TestCase):
    def test_no_interior_lines_is_perfect(self):
        self.assertEqual(block_similarity(["a", "b"], ["a", "x", "b"], 1, 2), 1.0)

    def test_blank_pairs_count_toward_average(self):
        lines = split_lines("{\n\n}")
        self.assertEqual(block_similarity(lines, ["{", "", "}"], 1, 3), 0.0)

    def test_interior_compared_trimmed(self):
        lines = split_lines("{\n    same\n}")
        self.assertEqual(block_similarity(lines, ["{", "same", "}"], 1, 3), 1.0)


class TestMultiOccurrence(unittest.TestCase):
    def test_non_overlapping(self):
        self.assertEqual(len(multi_occurrence_match("aaaa", "aa")), 2)
        self.assertEqual(len(multi_occurrence_match("aaa", "aa")), 1)

    def test_lines_of_each_occurrence(self):
        matches = multi_occurrence_match("Hello\nHello\nbye", "Hello")
        self.assertEqual([m.start_line for m in matches], [1, 2])

    def test_empty_pattern(self):
        self.assertEqual(multi_occurrence_match("abc", ""), [])


class TestIterCandidates(unittest.TestCase):
    def test_strategy_order(self):
        content = "Hello, World!\nHello, again!\nGoodbye!"
        strategies = [c.strategy for c in iter_candidates(content, "Hello")]
        self.assertEqual(strategies, ["exact", "multi_occurrence", "multi_occurrence"])


if __name__ == "__main__":
    unittest.main()
