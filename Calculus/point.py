import logging
import math
from typing import Dict, List

logger = logging.getLogger(__name__)

# Bound in every Point, hidden from the free-variable view.
RESERVED_BINDINGS = {'e': math.e, 'pi': math.pi}


def _parse_value(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Binding for '{name}' is not a number: '{raw}'")
        return math.nan


class Point:
    """Variable bindings parsed from ``"name value name value ..."``.

    Unbound names read as 0; ``e`` and ``pi`` are always available but are
    not reported by ``variables``.
    """

    def __init__(self, text: str = ''):
        self.bindings: Dict[str, float] = dict(RESERVED_BINDINGS)
        self._names: List[str] = []

        tokens = (text or '').split()
        if len(tokens) % 2:
            logger.warning(f"Ignoring variable '{tokens[-1]}' with no value")
            tokens = tokens[:-1]

        for name, raw in zip(tokens[::2], tokens[1::2]):
            self.bindings[name] = _parse_value(name, raw)
            if name not in self._names:
                self._names.append(name)

    @property
    def variables(self) -> List[str]:
        return [name for name in self._names if name not in RESERVED_BINDINGS]

    def get(self, name: str) -> float:
        return self.bindings.get(name, 0.0)

    def __repr__(self):
        pairs = ' '.join(f"{name} {self.bindings[name]}" for name in self._names)
        return f"Point({pairs!r})"
