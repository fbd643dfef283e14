"""
Host model: the element/document accessors the sync engine is allowed to use.

ModelDocument is the in-process stand-in for the host's document: it owns
the elements, yields the candidate categories and wraps a batch of writes in
an all-or-nothing transaction. The engine itself only ever calls
lookup / has / set_param / is_read_only on an element.
"""
import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from gerpaas.config import CANDIDATE_CATEGORIES

logger = logging.getLogger("gerpaas-host")

Point = Tuple[float, float, float]


class ParameterMissingError(LookupError):
    """A parameter required by a rule is not present on the element."""

    def __init__(self, element_id: str, name: str):
        self.element_id = element_id
        self.name = name
        super().__init__(f"Parameter '{name}' not found (ElementId={element_id})")


@dataclass
class ModelElement:
    element_id: str
    category: str = ""
    family_name: str = ""
    type_name: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)
    read_only: set = field(default_factory=set)
    bounding_box: Optional[Tuple[Point, Point]] = None   # (min, max) in host units
    location: Optional[Point] = None
    host_name: Optional[str] = None

    def has(self, name: str) -> bool:
        return name in self.parameters

    def lookup(self, name: str) -> Any:
        """Raw parameter value, or None when the element does not carry it."""
        return self.parameters.get(name)

    def is_read_only(self, name: str) -> bool:
        return name in self.read_only

    def set_param(self, name: str, value: Any) -> bool:
        """Write a parameter. Read-only parameters are left untouched."""
        if name in self.read_only:
            logger.debug("Parameter '%s' is read-only on %s", name, self.element_id)
            return False
        self.parameters[name] = value
        return True


class ModelDocument:
    """A set of elements plus the unit-of-work used by a sync run."""

    def __init__(self, elements: Optional[Sequence[ModelElement]] = None):
        self._elements: List[ModelElement] = list(elements or [])
        self._in_transaction = False

    @property
    def elements(self) -> List[ModelElement]:
        return list(self._elements)

    def get(self, element_id: str) -> Optional[ModelElement]:
        for element in self._elements:
            if element.element_id == element_id:
                return element
        return None

    def candidates(self) -> List[ModelElement]:
        """Cable trays first, then fittings, as the host collectors return them."""
        ordered = []
        for category in CANDIDATE_CATEGORIES:
            ordered.extend(e for e in self._elements if e.category == category)
        return ordered

    @contextmanager
    def transaction(self, name: str) -> Iterator["ModelDocument"]:
        """
        All writes inside the block become visible together.

        If the block raises, every element's parameters are restored to the
        snapshot taken on entry and the exception propagates.
        """
        if self._in_transaction:
            raise RuntimeError(f"Transaction '{name}' started inside an open transaction")
        snapshot = {id(e): copy.deepcopy(e.parameters) for e in self._elements}
        self._in_transaction = True
        logger.debug("Transaction started: %s", name)
        try:
            yield self
        except Exception:
            for element in self._elements:
                element.parameters = snapshot[id(element)]
            logger.warning("Transaction rolled back: %s", name)
            raise
        finally:
            self._in_transaction = False
        logger.debug("Transaction committed: %s", name)
