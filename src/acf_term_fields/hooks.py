from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Union

from acf_term_fields.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PRIORITY = 10


class TermHook(str, Enum):
    """Term retrieval extension points."""

    GET_TERMS = "get_terms"
    GET_THE_TERMS = "get_the_terms"
    WP_GET_OBJECT_TERMS = "wp_get_object_terms"
    GET_TERM = "get_term"


HookName = Union[TermHook, str]


def _hook_key(name: HookName) -> str:
    return name.value if isinstance(name, TermHook) else str(name)


@dataclass(frozen=True, slots=True)
class FilterCallback:
    """A registered filter.

    Args:
        callback: Callable receiving the filtered value plus extra arguments.
        priority: Lower runs first.
        accepted_args: Number of positional arguments passed, value included.
        seq: Registration order, breaks priority ties.
    """

    callback: Callable[..., Any]
    priority: int
    accepted_args: int
    seq: int

    def __call__(self, value: Any, *args: Any) -> Any:
        extra = args[: max(0, self.accepted_args - 1)]
        return self.callback(value, *extra)


@dataclass(slots=True)
class FilterRegistry:
    """Named filters applied to values as they flow out of retrieval paths.

    Callbacks run by ascending priority, then registration order. Each one
    gets the value returned by the previous one.
    """

    _filters: Dict[str, List[FilterCallback]] = field(default_factory=dict)
    _counter: Any = field(default_factory=itertools.count)
    _lock: Any = field(default_factory=threading.Lock)

    def add_filter(
        self,
        name: HookName,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
        accepted_args: int = 1,
    ) -> None:
        """Register a filter callback.

        Args:
            name: Extension point.
            callback: Filter callable.
            priority: Lower runs first.
            accepted_args: Arguments passed to the callback, value included.
        """
        key = _hook_key(name)
        entry = FilterCallback(
            callback=callback,
            priority=int(priority),
            accepted_args=max(1, int(accepted_args)),
            seq=next(self._counter),
        )
        with self._lock:
            bucket = list(self._filters.get(key, []))
            bucket.append(entry)
            bucket.sort(key=lambda f: (f.priority, f.seq))
            self._filters[key] = bucket
        logger.debug(f"Filtro adicionado: {key} prioridade={priority}")

    def remove_filter(
        self,
        name: HookName,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> bool:
        """Remove a filter callback.

        Returns:
            bool: True if a callback was removed.
        """
        key = _hook_key(name)
        with self._lock:
            bucket = self._filters.get(key, [])
            kept = [
                f for f in bucket if not (f.callback == callback and f.priority == priority)
            ]
            self._filters[key] = kept
            return len(kept) != len(bucket)

    def has_filter(self, name: HookName, callback: Callable[..., Any] | None = None) -> bool:
        bucket = self._filters.get(_hook_key(name), [])
        if callback is None:
            return bool(bucket)
        return any(f.callback == callback for f in bucket)

    def apply_filters(self, name: HookName, value: Any, *args: Any) -> Any:
        """Run a value through the filters of an extension point.

        Args:
            name: Extension point.
            value: Value to filter.
            *args: Context passed to callbacks accepting it.

        Returns:
            Any: The filtered value.
        """
        for entry in self._filters.get(_hook_key(name), []):
            value = entry(value, *args)
        return value


__all__ = ["TermHook", "FilterCallback", "FilterRegistry", "DEFAULT_PRIORITY"]
