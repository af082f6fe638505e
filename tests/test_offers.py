"""Tests for offer detection."""

import pytest

from dealroom.tools.offers import extract_offer


class TestExtractOffer:
    def test_dollar_with_thousands_separator(self):
        assert extract_offer("I can offer $900,000") == 900_000

    def test_dollar_with_decimals(self):
        assert extract_offer("How about $1,050,000.50?") == 1_050_000.5

    def test_dollar_without_separator(self):
        assert extract_offer("$875000 is my number") == 875_000

    def test_space_after_currency(self):
        assert extract_offer("I'd go to $ 950,000") == 950_000

    def test_magnitude_word_without_currency(self):
        assert extract_offer("we could do 1.2 million") == 1_200_000

    def test_short_magnitude_suffix(self):
        assert extract_offer("$950k and we close") == 950_000

    def test_currency_and_magnitude(self):
        assert extract_offer("Asking $1.5M firm") == 1_500_000

    def test_usd_prefix(self):
        assert extract_offer("USD 800,000 is fair") == 800_000

    def test_first_qualifying_amount_wins(self):
        assert extract_offer("Between $900,000 and $1,000,000") == 900_000

    @pytest.mark.parametrize(
        "text",
        [
            "Can we close by March 15?",
            "The building has 40 units",
            "Give me 2 minutes",
            "There are 3 bedrooms and 2 baths",
            "Is unit 4B still vacant?",
            "The building is just 200m from the water.",
            "Apartment 12K has the best view",
            "We need 2mm of clearance on the vents",
            "",
        ],
    )
    def test_bare_numbers_are_not_offers(self, text):
        assert extract_offer(text) is None

    def test_skips_bare_number_before_offer(self):
        assert extract_offer("After 30 days I could pay $910,000") == 910_000

    def test_none_text(self):
        assert extract_offer(None) is None

    def test_deterministic(self):
        text = "Final answer: $925,000"
        assert extract_offer(text) == extract_offer(text) == 925_000

    def test_unit_label_before_offer(self):
        assert extract_offer("Unit 4B aside, I could pay $910,000") == 910_000

    def test_long_magnitude_word_without_currency(self):
        assert extract_offer("I'd say 950 thousand") == 950_000
