"""Normalizes heterogeneous backend results into a single text string."""

from collections.abc import Mapping, Sequence
from typing import Any, Callable, List, Optional, Tuple, Union

PathStep = Union[str, int]
Strategy = Callable[[Any], Optional[str]]


def lookup(result: Any, path: Tuple[PathStep, ...]) -> Any:
    """Walks ``path`` through dicts, SDK objects and lists.

    String steps are tried as mapping keys first and attributes second;
    integer steps index into sequences. Returns ``None`` as soon as a step
    is missing.
    """
    current = result
    for step in path:
        if current is None:
            return None
        if isinstance(step, int):
            if isinstance(current, (str, bytes)) or not isinstance(current, Sequence):
                return None
            try:
                current = current[step]
            except IndexError:
                return None
            continue
        if isinstance(current, Mapping):
            current = current.get(step)
        else:
            current = getattr(current, step, None)
    return current


def path_strategy(*path: PathStep) -> Strategy:
    """Creates a strategy that reads a non-empty string at ``path``."""

    def strategy(result: Any) -> Optional[str]:
        value = lookup(result, path)
        if isinstance(value, str) and value:
            return value
        return None

    strategy.__name__ = "path:" + ".".join(str(step) for step in path)
    return strategy


def raw_string(result: Any) -> Optional[str]:
    if isinstance(result, str) and result:
        return result
    return None


DEFAULT_STRATEGIES: List[Strategy] = [
    path_strategy("response", "candidates", 0, "content", "parts", 0, "text"),
    path_strategy("candidates", 0, "content", "parts", 0, "text"),
    path_strategy("output", 0, "content", 0, "text"),
    path_strategy("outputText"),
    path_strategy("output_text"),
    path_strategy("text"),
    path_strategy("choices", 0, "message", "content"),
    path_strategy("message", "content"),
    path_strategy("content", 0, "text"),
    path_strategy("content"),
    raw_string,
]


class ResponseExtractor:
    """Tries each extraction strategy in priority order.

    Returns the first text found, or ``None`` when the result has no
    recognizable shape. ``None`` is not an error here; the caller decides.
    """

    def __init__(self, strategies: Optional[List[Strategy]] = None):
        self.strategies = list(strategies) if strategies is not None else list(DEFAULT_STRATEGIES)

    def extract(self, result: Any) -> Optional[str]:
        if result is None:
            return None
        for strategy in self.strategies:
            text = strategy(result)
            if text is not None:
                return text
        return None
