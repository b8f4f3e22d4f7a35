from __future__ import annotations

import re

CNPJ_PATTERN = r"^\d{2}\.\d{3}\.\d{3}/\d{4}-\d{2}$"
PHONE_PATTERN = r"^\(\d{2}\)\s\d{4,5}-\d{4}$"

_NON_DIGITS = re.compile(r"\D")


def only_digits(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def _cpf_check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def is_valid_cpf(value: str) -> bool:
    """Check a CPF (Brazilian national ID) against its two mod-11 check digits.

    Punctuation is ignored, so both ``529.982.247-25`` and ``52998224725`` pass.
    """
    digits = only_digits(value)
    if len(digits) != 11 or digits == digits[0] * 11:
        return False
    first = _cpf_check_digit(digits[:9])
    second = _cpf_check_digit(digits[:10])
    return digits[9] == str(first) and digits[10] == str(second)


def normalize_name(value: str) -> str:
    """Lookup key for names: trimmed, inner whitespace collapsed, case-folded."""
    return " ".join(value.split()).casefold()
