"""Offer detection: find the first monetary amount in a turn."""

import re
from decimal import Decimal

OFFER_PATTERN = re.compile(
    r"(?P<currency>US\$|\$|€|£|\bUSD\s?)?\s?"
    r"(?P<amount>\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"
    r"(?:\s?(?P<magnitude>billion|million|thousand|bn|mil|mm|k|m|b)\b)?",
    re.IGNORECASE,
)

MAGNITUDES = {
    "thousand": 1_000,
    "k": 1_000,
    "million": 1_000_000,
    "mil": 1_000_000,
    "mm": 1_000_000,
    "m": 1_000_000,
    "billion": 1_000_000_000,
    "bn": 1_000_000_000,
    "b": 1_000_000_000,
}

# Suffixes that double as unit labels and distances ("4B", "200m").
CURRENCY_ONLY_SUFFIXES = frozenset({"k", "m", "mm", "b"})


def extract_offer(text: str) -> float | None:
    """Return the first currency-like amount in ``text``, or None.

    A bare number only counts when it carries a currency marker ("$900,000")
    or a magnitude word ("1.2 million"), so dates, counts, unit labels and
    distances are ignored. Short suffixes ("950k", "1.5M") need the currency
    marker too.
    """
    if not text:
        return None

    for match in OFFER_PATTERN.finditer(text):
        currency = match.group("currency")
        magnitude = (match.group("magnitude") or "").lower()
        if not currency and (not magnitude or magnitude in CURRENCY_ONLY_SUFFIXES):
            continue

        value = Decimal(match.group("amount").replace(",", ""))
        if magnitude:
            value *= MAGNITUDES[magnitude]
        return float(value)

    return None
