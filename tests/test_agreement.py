"""Tests for agreement detection."""

import pytest

from dealroom.tools.agreement import detects_agreement


class TestDetectsAgreement:
    def test_counterpart_declares_deal(self):
        assert detects_agreement("$950,000?", "We have a deal at $950,000.") is True

    def test_user_accepts(self):
        assert detects_agreement("OK, I accept that price.", "Great.") is True

    def test_lets_proceed(self):
        assert detects_agreement("Let's proceed with the paperwork", "") is True

    def test_curly_apostrophe(self):
        assert detects_agreement("It’s a deal!", "") is True

    def test_case_insensitive(self):
        assert detects_agreement("AGREED", "") is True

    def test_no_closing_language(self):
        assert detects_agreement("Can you go lower?", "The price is firm at $1,100,000.") is False

    def test_handles_missing_reply(self):
        assert detects_agreement("Maybe next week", None) is False

    def test_offer_accepted(self):
        assert detects_agreement("$1,000,000", "Offer accepted.") is True

    def test_agreed_opening_a_sentence(self):
        assert detects_agreement("Meet at $1,000,000?", "Fine. Agreed, $1,000,000 it is.") is True

    def test_negation_in_another_clause_does_not_block(self):
        assert detects_agreement("No, wait. We have a deal.", "") is True

    @pytest.mark.parametrize(
        "user_text, counterpart_text",
        [
            ("I can offer $900,000", "Sorry, that offer cannot be accepted."),
            ("$700,000?", "I'm afraid $700,000 will not be accepted. I need $1,150,000."),
            ("I never agreed to that", ""),
            ("$950,000", "I can't say we have a deal yet."),
            ("I don't accept those terms", ""),
            ("We won't shake on it at that price", ""),
        ],
    )
    def test_rejections_are_not_agreement(self, user_text, counterpart_text):
        assert detects_agreement(user_text, counterpart_text) is False
