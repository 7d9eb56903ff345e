from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from piecework.core.words import number_to_words, to_french_words


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (0, "Zéro dirham"),
        (80, "Quatre-vingts dirhams"),
        (81, "Quatre-vingt-un dirhams"),
        (Decimal("21.50"), "Vingt-et-un dirhams, cinquante centimes"),
        (71, "Soixante-onze dirhams"),
        (77, "Soixante-dix-sept dirhams"),
        (91, "Quatre-vingt-onze dirhams"),
        (99, "Quatre-vingt-dix-neuf dirhams"),
        (61, "Soixante-et-un dirhams"),
        (11, "Onze dirhams"),
        (200, "Deux cents dirhams"),
        (250, "Deux cent cinquante dirhams"),
        (280, "Deux cent quatre-vingts dirhams"),
        (1000, "Mille dirhams"),
        (2_000_000, "Deux millions dirhams"),
        (1_234_567, "Un million deux cent trente-quatre mille cinq cent soixante-sept dirhams"),
        (Decimal("31.05"), "Trente-et-un dirhams, cinq centimes"),
        (Decimal("0.50"), "Cinquante centimes"),
    ],
)
def test_to_french_words(amount, expected):
    assert to_french_words(amount) == expected


def test_centimes_round_half_up():
    assert to_french_words(Decimal("10.125")) == "Dix dirhams, treize centimes"
    assert to_french_words(Decimal("1.999")) == "Deux dirhams"
    assert to_french_words(Decimal("0.004")) == "Zéro dirham"


def test_accepts_floats_and_strings():
    assert to_french_words(21.5) == "Vingt-et-un dirhams, cinquante centimes"
    assert to_french_words("80") == "Quatre-vingts dirhams"


@pytest.mark.parametrize("amount", [-1, Decimal("-0.01"), float("nan"), float("inf"), "abc", None])
def test_invalid_amounts_return_sentinel(amount):
    assert to_french_words(amount) == "Montant invalide"


def test_number_to_words_is_whitespace_normalised():
    words = number_to_words(1_001_001)
    assert "  " not in words
    assert words == "un million mille un"


@pytest.mark.parametrize("amount", [Decimal("1e30"), "1e40"])
def test_amounts_beyond_decimal_precision_return_sentinel(amount):
    assert to_french_words(amount) == "Montant invalide"
