"""Domain value objects"""

from domain.value_objects.reveal_unit import RevealUnit, RevealUnitKind

__all__ = [
    "RevealUnit",
    "RevealUnitKind",
]
