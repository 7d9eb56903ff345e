"""Spell out dirham amounts in French, as printed on transfer orders."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

INVALID_AMOUNT = "Montant invalide"
ZERO_AMOUNT = "Zéro dirham"

UNITS = ["", "un", "deux", "trois", "quatre", "cinq", "six", "sept", "huit", "neuf"]
TEENS = ["dix", "onze", "douze", "treize", "quatorze", "quinze", "seize", "dix-sept", "dix-huit", "dix-neuf"]
TENS = ["", "dix", "vingt", "trente", "quarante", "cinquante", "soixante", "soixante-dix", "quatre-vingt", "quatre-vingt-dix"]


def _below_hundred(n: int) -> str:
    if n < 10:
        return UNITS[n]
    if n < 20:
        return TEENS[n - 10]

    ten, unit = divmod(n, 10)
    if ten in (7, 9):
        return f"{TENS[ten - 1]}-{TEENS[unit]}"
    if unit == 0:
        return "quatre-vingts" if ten == 8 else TENS[ten]
    if unit == 1 and ten < 7:
        return f"{TENS[ten]}-et-un"
    return f"{TENS[ten]}-{UNITS[unit]}"


def number_to_words(n: int) -> str:
    """French cardinal phrase for a non-negative integer."""

    if n == 0:
        return "zéro"

    parts: list[str] = []

    millions, n = divmod(n, 1_000_000)
    if millions:
        parts.append("un million" if millions == 1 else f"{number_to_words(millions)} millions")

    thousands, n = divmod(n, 1000)
    if thousands:
        parts.append("mille" if thousands == 1 else f"{number_to_words(thousands)} mille")

    hundreds, n = divmod(n, 100)
    if hundreds:
        word = "cent" if hundreds == 1 else f"{UNITS[hundreds]} cent"
        parts.append(word if n else word + "s")

    if n:
        parts.append(_below_hundred(n))

    return " ".join(" ".join(parts).split())


def to_french_words(amount: object) -> str:
    """Render ``amount`` as ``"<n> dirhams, <m> centimes"`` in French prose.

    Centimes are rounded half-up to two digits. Negative, NaN, infinite,
    unparsable or oversized input yields ``"Montant invalide"``.
    """

    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        if not value.is_finite() or value < 0:
            return INVALID_AMOUNT
        # amounts too wide for the decimal context cannot be rounded to centimes
        cents_total = int(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) * 100)
    except (InvalidOperation, TypeError, ValueError):
        return INVALID_AMOUNT

    dirhams, centimes = divmod(cents_total, 100)
    if dirhams == 0 and centimes == 0:
        return ZERO_AMOUNT

    result = ""
    if dirhams:
        result = f"{number_to_words(dirhams)} DIRHAMS"
    if centimes:
        if dirhams:
            result += ", "
        result += f"{number_to_words(centimes)} CENTIMES"

    result = " ".join(result.split())
    return result[0].upper() + result[1:].lower()
