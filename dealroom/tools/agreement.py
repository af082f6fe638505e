"""Agreement detection: deal-closing language in an exchange."""

import re

AGREEMENT_PATTERNS = re.compile(
    r"(?:^|(?<=[.!?])\s*)agreed\b"
    r"|\b("
    r"it'?s a deal|we have a deal|we'?ve got a deal|you'?ve got a deal|you have a deal"
    r"|deal done|done deal"
    r"|i agree|we agree"
    r"|i accept|we accept|i'?ll accept|we'?ll accept|offer accepted"
    r"|let'?s proceed|let us proceed|happy to proceed"
    r"|shake on it"
    r")\b",
    re.IGNORECASE | re.MULTILINE,
)

NEGATIONS = frozenset({"not", "no", "never", "cannot", "can't", "won't", "don't", "isn't"})
NEGATION_WINDOW = 4
CLAUSE_BREAK = re.compile(r"[.,;:!?\n]")


def _normalize(text: str | None) -> str:
    # Curly apostrophes from mobile keyboards.
    return (text or "").replace("’", "'")


def _negated(text: str, start: int) -> bool:
    """True if a negation sits in the few words before ``start`` in the same clause."""
    clause = CLAUSE_BREAK.split(text[:start])[-1]
    words = clause.lower().split()[-NEGATION_WINDOW:]
    return any(w in NEGATIONS or w.endswith("n't") for w in words)


def detects_agreement(user_text: str | None, counterpart_text: str | None) -> bool:
    """Return True if either side of the exchange uses deal-closing language.

    Negated phrasings ("I can't say we have a deal") do not count. Whether a
    first offer exists is not checked here; the state machine only honors a
    match once the offer ledger has a first offer.
    """
    combined = f"{_normalize(user_text)}\n{_normalize(counterpart_text)}"
    return any(
        not _negated(combined, match.start())
        for match in AGREEMENT_PATTERNS.finditer(combined)
    )
