"""Pure text scanners applied to negotiation turns."""

from dealroom.tools.agreement import AGREEMENT_PATTERNS, detects_agreement
from dealroom.tools.offers import OFFER_PATTERN, extract_offer

__all__ = [
    "AGREEMENT_PATTERNS",
    "OFFER_PATTERN",
    "detects_agreement",
    "extract_offer",
]
