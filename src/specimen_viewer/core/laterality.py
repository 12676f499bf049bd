"""Infer anatomical laterality from free-text file and directory names."""

import re
from collections.abc import Iterable
from typing import Any, Optional

from ..models.files import Laterality
from .paths import normalize_slashes

# English, Spanish, Catalan, French and Italian tokens
_BILATERAL = re.compile(
    r"\b(bilat[eé]ral(?:e|es|s)?|both sides?|pair(?:ed)?|double|ambos lados|ambd[oó]s costats)\b",
    re.IGNORECASE,
)
_LEFT = re.compile(
    r"\b(left|sinist(?:er|ra|ro)|izquierd[ao]s?|esquerr[ae]s?|gauche)\b",
    re.IGNORECASE,
)
_RIGHT = re.compile(
    r"\b(right|dex(?:ter|tra|tre)|derech[ao]s?|dret[ae]?s?|destr[ao]|droite)\b",
    re.IGNORECASE,
)

_SEPARATORS = re.compile(r"[_\-]+")
_PARENS = re.compile(r"[()]")


def _prepare(value: Any) -> str:
    text = normalize_slashes(str(value))
    text = _SEPARATORS.sub(" ", text)
    text = _PARENS.sub(" ", text)
    return text.lower()


def infer_laterality(sources: Iterable[Any]) -> Optional[Laterality]:
    """
    Scan candidate strings for left/right/bilateral tokens.

    Bilateral wins over either side, and left is checked before right.
    """
    text = " ".join(_prepare(value) for value in sources if value)
    if not text.strip():
        return None

    if _BILATERAL.search(text):
        return Laterality.BILATERAL
    if _LEFT.search(text):
        return Laterality.LEFT
    if _RIGHT.search(text):
        return Laterality.RIGHT
    return None
