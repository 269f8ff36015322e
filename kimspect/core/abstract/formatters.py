from __future__ import annotations

from typing import Any, Callable, Optional

import pydantic as pd

from kimspect.core.models.result import Result

RenderFunc = Callable[[Result], Any]


class Formatter(pd.BaseModel):
    """A registered output format.

    `rich_console` formatters return a rich renderable that has to be printed through a `Console`,
    the others return the final text.
    """

    model_config = pd.ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    render: RenderFunc
    rich_console: bool = False

    def __call__(self, result: Result) -> Any:
        return self.render(result)


FORMATTERS_REGISTRY: dict[str, Formatter] = {}


def register(name: Optional[str] = None, *, rich_console: bool = False) -> Callable[[RenderFunc], RenderFunc]:
    """
    Register the decorated function as an output format, under its own name unless `name` is given.
    The function itself is returned unchanged.

    Raises:
        ValueError: If another formatter is already registered under the same name.
    """

    def decorator(func: RenderFunc) -> RenderFunc:
        formatter = Formatter(name=name or func.__name__, render=func, rich_console=rich_console)
        if formatter.name in FORMATTERS_REGISTRY:
            raise ValueError(f"Formatter '{formatter.name}' is already registered")

        FORMATTERS_REGISTRY[formatter.name] = formatter
        return func

    return decorator


def find(name: str) -> Formatter:
    try:
        return FORMATTERS_REGISTRY[name]
    except KeyError as e:
        raise ValueError(f"Formatter '{name}' not found, available: {', '.join(list_available())}") from e


def list_available() -> list[str]:
    return list(FORMATTERS_REGISTRY)


__all__ = ["Formatter", "register", "find", "list_available"]
