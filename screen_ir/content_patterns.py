"""
Content-pattern detection for text layers.

A priority-ordered table of (name, predicate); the first predicate that
accepts the trimmed text names the pattern. Used to give otherwise
anonymous text nodes a semantic prop name (``price``, ``date``, ...).
"""

import re
from typing import Callable, Optional

CURRENCY_SYMBOLS = ("₽", "$", "€", "£", "¥", "₴", "₸", "₿")

PAYMENT_BRANDS = (
    "МИР", "MIR", "MasterCard", "Visa", "СБП", "SBP", "Maestro",
    "UnionPay", "AmEx", "American Express", "JCB",
)

# nominative + genitive stems
CYRILLIC_MONTHS = (
    "январ", "феврал", "март", "апрел", "ма", "июн",
    "июл", "август", "сентябр", "октябр", "ноябр", "декабр",
)

LATIN_MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
)

_DIGIT = re.compile(r"[0-9]")
_DAY = re.compile(r"[0-9]{1,2}")
_SIGNED_AMOUNT = re.compile(r"^[+\-−]\s*[0-9\s ]+$")
_THOUSANDS_SEPARATOR = re.compile(r"[0-9][\s ][0-9]")
_MASKED_DIGITS = re.compile(r"^[•·*\s]*[0-9]{4}$")
_PHONE = re.compile(r"^\+[0-9][0-9\s\-().]{7,}$")
_PERCENTAGE = re.compile(r"^[0-9\s,.]+%$")


def _digit_count(text: str) -> int:
    return len(_DIGIT.findall(text))


def is_price(text: str) -> bool:
    return any(s in text for s in CURRENCY_SYMBOLS) and bool(_DIGIT.search(text))


def is_amount(text: str) -> bool:
    if not _SIGNED_AMOUNT.match(text) or not _DIGIT.search(text):
        return False
    if _THOUSANDS_SEPARATOR.search(text):
        return _digit_count(text) <= 7
    return _digit_count(text) <= 4


def is_card_brand(text: str) -> bool:
    lowered = text.lower()
    return any(lowered == brand.lower() for brand in PAYMENT_BRANDS)


def is_card_last_digits(text: str) -> bool:
    return bool(_MASKED_DIGITS.match(text))


def is_date(text: str) -> bool:
    lowered = text.lower()
    if not _DAY.search(lowered):
        return False
    return any(m in lowered for m in CYRILLIC_MONTHS) or any(m in lowered for m in LATIN_MONTHS)


def is_phone(text: str) -> bool:
    return bool(_PHONE.match(text)) and _digit_count(text) >= 7


def is_percentage(text: str) -> bool:
    return bool(_PERCENTAGE.match(text)) and bool(_DIGIT.search(text))


CONTENT_PATTERNS: list[tuple[str, Callable[[str], bool]]] = [
    ("price", is_price),
    ("amount", is_amount),
    ("cardBrand", is_card_brand),
    ("cardLastDigits", is_card_last_digits),
    ("date", is_date),
    ("phone", is_phone),
    ("percentage", is_percentage),
]


def detect_content_pattern(text: Optional[str]) -> Optional[str]:
    """Name of the first matching pattern, or None."""
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    for name, test in CONTENT_PATTERNS:
        if test(trimmed):
            return name
    return None
