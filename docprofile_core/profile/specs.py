"""
Profile Specifications
======================

Immutable allow-list records supplied by each call site of the profile
checkers.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union
import math

UNBOUNDED = math.inf

Occurs = Union[int, float]


@dataclass(frozen=True)
class ChildSpec:
    """
    Permitted child element and its cardinality.

    Attributes:
        name: Local name of the child element
        min_occurs: Minimum number of occurrences (default 1)
        max_occurs: Maximum number of occurrences (default 1, UNBOUNDED for no limit)
    """
    name: str
    min_occurs: int = 1
    max_occurs: Occurs = 1

    def __post_init__(self):
        if not self.name:
            raise ValueError("ChildSpec requires a name")
        if self.min_occurs < 0 or self.max_occurs < self.min_occurs:
            raise ValueError(
                f"Invalid cardinality {self.min_occurs}..{self.max_occurs} for {self.name}"
            )

    @property
    def range_text(self) -> str:
        """Cardinality as shown in messages, e.g. "0..unbounded"."""
        upper = "unbounded" if self.max_occurs == UNBOUNDED else str(int(self.max_occurs))
        return f"{self.min_occurs}..{upper}"

    def accepts(self, count: int) -> bool:
        return self.min_occurs <= count <= self.max_occurs


@dataclass(frozen=True)
class AttributeSpec:
    """
    Attribute allow-list of an element.

    Attributes:
        required: Attributes that must be present
        optional: Attributes that may be present
        base_schema_defined: All attributes the formal schema defines for
            the element, including those the profile excludes
    """
    required: Tuple[str, ...] = ()
    optional: Tuple[str, ...] = ()
    base_schema_defined: Tuple[str, ...] = ()

    @classmethod
    def of(cls, required: Iterable[str] = (), optional: Iterable[str] = (),
           base_schema_defined: Iterable[str] = ()) -> "AttributeSpec":
        return cls(tuple(required), tuple(optional), tuple(base_schema_defined))
