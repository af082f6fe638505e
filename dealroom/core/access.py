"""Access-code checks for starting a session."""

from typing import Callable

AccessValidator = Callable[[str], bool]


class CodeSetValidator:
    """Accepts any code from a fixed set (exact match, surrounding blanks ignored)."""

    def __init__(self, codes):
        self._codes = frozenset(codes)

    def __call__(self, code: str) -> bool:
        return bool(code) and code.strip() in self._codes
