"""Function and filter registry for the rendergate Environment.

Each entry records the callable together with its escape-safety
declaration, which the compiler consults to decide whether a printed
expression still needs the escape gate.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, ItemsView, KeysView
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rendergate.nodes import Expr
from rendergate.utils.constants import SAFE_FOR_ALL

if TYPE_CHECKING:
    from rendergate.environment.core import Environment

# Receives the call site (FuncCall or Filter node); returns the set
# of escape strategies the result is already safe for.
SafetyCallback = Callable[[Expr], Iterable[str]]


@dataclass(frozen=True, slots=True)
class TemplateCallable:
    """A registered template function or filter.

    Attributes:
        name: Name used in template source
        callable: The Python callable
        is_safe: Strategies the output is always safe for ("all" for any)
        is_safe_callback: Per-call-site safety decision, used when
            ``is_safe`` is empty
    """

    name: str
    callable: Callable[..., Any]
    is_safe: frozenset[str] = frozenset()
    is_safe_callback: SafetyCallback | None = None

    def safe_for(self, strategy: str, call: Expr | None = None) -> bool:
        """Whether this callable's output at ``call`` needs no escaping for ``strategy``."""
        if SAFE_FOR_ALL in self.is_safe or strategy in self.is_safe:
            return True
        if self.is_safe_callback is not None and call is not None:
            declared = frozenset(self.is_safe_callback(call))
            return SAFE_FOR_ALL in declared or strategy in declared
        return False


def as_template_callable(
    name: str,
    func: Callable[..., Any] | TemplateCallable,
    *,
    is_safe: Iterable[str] = (),
    is_safe_callback: SafetyCallback | None = None,
) -> TemplateCallable:
    if isinstance(func, TemplateCallable):
        return func
    return TemplateCallable(name, func, frozenset(is_safe), is_safe_callback)


class CallableRegistry:
    """Dict-like view over an Environment's functions or filters.

    Supports:
        - env.filters['name'] = func
        - env.filters.update({'name': func})
        - func = env.filters['name']
        - 'name' in env.filters

    Plain callables are stored without safety declarations. All mutations
    use copy-on-write so templates compiled earlier keep a stable view.
    """

    __slots__ = ("_attr", "_env")

    def __init__(self, env: Environment, attr: str):
        self._env = env
        self._attr = attr

    def _get_dict(self) -> dict[str, TemplateCallable]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, TemplateCallable]) -> None:
        setattr(self._env, self._attr, d)
        # Compiled templates captured the old entries and safety decisions
        self._env.clear_cache()

    def __getitem__(self, name: str) -> Callable[..., Any]:
        return self._get_dict()[name].callable

    def __setitem__(self, name: str, func: Callable[..., Any] | TemplateCallable) -> None:
        new = self._get_dict().copy()
        new[name] = as_template_callable(name, func)
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(
        self, name: str, default: Callable[..., Any] | None = None
    ) -> Callable[..., Any] | None:
        entry = self._get_dict().get(name)
        return entry.callable if entry is not None else default

    def entry(self, name: str) -> TemplateCallable | None:
        """Return the full registration (callable plus safety) for ``name``."""
        return self._get_dict().get(name)

    def update(self, mapping: dict[str, Callable[..., Any] | TemplateCallable]) -> None:
        """Batch update entries."""
        new = self._get_dict().copy()
        for name, func in mapping.items():
            new[name] = as_template_callable(name, func)
        self._set_dict(new)

    def keys(self) -> KeysView[str]:
        return self._get_dict().keys()

    def items(self) -> ItemsView[str, TemplateCallable]:
        return self._get_dict().items()
