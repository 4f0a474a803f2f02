"""Route string tokenization.

Typical usage:
    tokens = tokenize("kalb payge Q822 fnt")
    tokens[1].text   # "PAYGE"
    tokens[1].raw    # "payge"
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Token:
    """One whitespace-delimited word of a route string.

    Attributes:
        text: Upper-cased token text
        index: Position in the token list
        raw: Text as typed
    """

    text: str
    index: int
    raw: str

    def __str__(self) -> str:
        return self.text


def tokenize(route: Any) -> list[Token]:
    """Split a route string into positioned tokens.

    Never fails: empty or non-string input gives an empty list.

    Args:
        route: Raw route string

    Returns:
        Tokens in input order

    Examples:
        >>> [t.text for t in tokenize("  kalb  DCT payge ")]
        ['KALB', 'DCT', 'PAYGE']
    """
    if not route or not isinstance(route, str):
        return []

    return [
        Token(text=word.upper(), index=index, raw=word)
        for index, word in enumerate(route.split())
    ]
