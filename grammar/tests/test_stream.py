"""
Tests for incremental statement detection
"""

from grammar.stream import ParseOp, PartialParse


def feed_all(parser, text):
    return [parser.feed(char) for char in text]


class TestPartialParse:
    """Test one-character-at-a-time framing"""

    def test_ready_on_newline(self):
        parser = PartialParse()
        assert feed_all(parser, "ab\n") == [ParseOp.UNREADY, ParseOp.UNREADY, ParseOp.READY]

    def test_newline_inside_parentheses(self):
        parser = PartialParse()
        ops = feed_all(parser, "a (\nb)\n")
        assert ops[3] == ParseOp.UNREADY
        assert ops[-1] == ParseOp.READY
        assert parser.depth == 0

    def test_unmatched_close_poisons_statement(self):
        parser = PartialParse()
        ops = feed_all(parser, "a) b")
        assert ops == [ParseOp.UNREADY, ParseOp.DISCARD, ParseOp.DISCARD, ParseOp.DISCARD]
        assert parser.poisoned

    def test_newline_clears_poison(self):
        parser = PartialParse()
        feed_all(parser, ")x")
        assert parser.feed("\n") == ParseOp.READY
        assert not parser.poisoned
        assert parser.feed("y") == ParseOp.UNREADY
