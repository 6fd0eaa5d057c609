"""
Reveal tokenization.

Splits display markup into reveal units so that a tag is never
shown half-way through the typing animation.
"""

from typing import Iterator, List

from domain.value_objects.reveal_unit import RevealUnit


def iter_reveal_units(text: str) -> Iterator[RevealUnit]:
    """
    Yield reveal units of `text` in document order.

    A '<' starts a tag unit that runs up to and including the next '>'.
    Without a closing '>' the rest of the string is one final tag unit.
    """
    i = 0
    length = len(text)
    while i < length:
        if text[i] == "<":
            end = text.find(">", i)
            if end == -1:
                yield RevealUnit.tag(text[i:])
                return
            yield RevealUnit.tag(text[i:end + 1])
            i = end + 1
        else:
            yield RevealUnit.char(text[i])
            i += 1


def tokenize_markup(text: str) -> List[RevealUnit]:
    """Return all reveal units of `text` as a list"""
    return list(iter_reveal_units(text))


def unit_delay_ms(unit: RevealUnit, base_delay_ms: float) -> float:
    """Delay to wait after `unit` is shown, in milliseconds"""
    return base_delay_ms * unit.delay_multiplier
