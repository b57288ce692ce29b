"""
Category and payment-method normalization.

Maps the spellings found in legacy rows and free-text input to one canonical
spelling per concept.
"""
from typing import Optional

from churchledger.services import categories

# Keys are lower-case; lookups lower-case the input first.
_CANONICAL = {
    # Entry categories
    "dizimo": categories.TITHE,
    "dízimo": categories.TITHE,
    "oferta": categories.OFFERING,
    "campanha": categories.CAMPAIGN,
    "doacao": categories.DONATION,
    "doação": categories.DONATION,

    # Payment methods
    "cartao": categories.CARD,
    "cartão": categories.CARD,
    "pix": categories.PIX,
    "dinheiro": categories.CASH,
    "transferencia": categories.BANK_TRANSFER,
    "transferência": categories.BANK_TRANSFER,
    "boleto": categories.BANK_SLIP,
    "nao informado": categories.NOT_INFORMED,
    "não informado": categories.NOT_INFORMED,
}


def normalize(text: str) -> str:
    """
    Return the canonical spelling of ``text``.

    Unknown values only get their first character upper-cased, so the result
    is not guaranteed to be part of the canonical vocabulary.
    """
    if not text:
        return ""

    canonical = _CANONICAL.get(text.lower())
    if canonical is not None:
        return canonical

    return text[0].upper() + text[1:]


def normalize_optional(text: Optional[str]) -> Optional[str]:
    """Normalize ``text``, mapping None and "" to None."""
    if not text:
        return None
    return normalize(text)


def is_tithe(category: Optional[str]) -> bool:
    return bool(category) and normalize(category) == categories.TITHE
