"""Tests for the verdict rules."""

import pytest

from chessledger.classifier import classify, classify_transcript
from chessledger.models import Transcript, Verdict


class TestProgramRule:

    @pytest.mark.parametrize("plies", [0, 5, 19, 20, 21, 120])
    @pytest.mark.parametrize("result", ["1-0", "0-1", "1/2-1/2", "*"])
    def test_program_white_always_suspected(self, plies, result):
        headers = {"WhiteType": "Program", "Result": result}
        assert classify(headers, plies) is Verdict.AI_SUSPECTED

    def test_program_wins_over_too_fast(self):
        # Both rule 1 and rule 2 match; the first one decides.
        assert classify({"WhiteType": "Program", "Result": "1-0"}, 3) is Verdict.AI_SUSPECTED

    def test_other_white_types_are_not_programs(self):
        assert classify({"WhiteType": "program", "Result": "1-0"}, 40) is Verdict.HUMAN_VERIFIED
        assert classify({"WhiteType": "Human", "Result": "1-0"}, 40) is Verdict.HUMAN_VERIFIED


class TestTooFastRule:

    def test_short_decisive_game(self):
        assert classify({"Result": "1-0"}, 19) is Verdict.AI_SUSPECTED_TOO_FAST
        assert classify({"Result": "0-1"}, 0) is Verdict.AI_SUSPECTED_TOO_FAST

    def test_twenty_plies_is_not_flagged(self):
        assert classify({"Result": "1-0"}, 20) is Verdict.HUMAN_VERIFIED

    def test_short_draw_is_not_flagged(self):
        assert classify({"Result": "1/2-1/2"}, 4) is Verdict.HUMAN_VERIFIED

    def test_missing_result_counts_as_not_a_draw(self):
        assert classify({}, 10) is Verdict.AI_SUSPECTED_TOO_FAST

    def test_unfinished_short_game(self):
        assert classify({"Result": "*"}, 12) is Verdict.AI_SUSPECTED_TOO_FAST


class TestTranscript:

    def test_classify_transcript_uses_same_rules(self):
        t = Transcript(text="...", headers={"WhiteType": "Human", "Result": "1-0"}, ply_count=35)
        assert classify_transcript(t) is Verdict.HUMAN_VERIFIED

    def test_deterministic(self):
        headers = {"Result": "0-1"}
        assert {classify(headers, 15) for _ in range(10)} == {Verdict.AI_SUSPECTED_TOO_FAST}

    def test_labels(self):
        assert Verdict.AI_SUSPECTED.label == "AI Suspected"
        assert Verdict.AI_SUSPECTED_TOO_FAST.label == "AI Suspected (Too Fast)"
        assert Verdict.HUMAN_VERIFIED.label == "Human Verified"
