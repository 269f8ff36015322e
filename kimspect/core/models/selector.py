from __future__ import annotations

import enum
import logging
import re
from typing import Optional, Pattern

import pydantic as pd

from kimspect.core.exceptions import ValidationError

logger = logging.getLogger("kimspect")


class ResourceKind(str, enum.Enum):
    Pod = "Pod"
    Node = "Node"

    @property
    def plural(self) -> str:
        return f"{self.value.lower()}s"


class OutputMode(str, enum.Enum):
    normal = "normal"
    wide = "wide"


class EnvVarsFilter(pd.BaseModel):
    """Selects containers by name. A leading `!` in the parsed pattern inverts the match."""

    model_config = pd.ConfigDict(frozen=True)

    pattern: Pattern[str]
    invert: bool = False

    @classmethod
    def parse(cls, value: str) -> EnvVarsFilter:
        invert = value.startswith("!")
        raw_pattern = value[1:] if invert else value

        try:
            pattern = re.compile(raw_pattern)
        except re.error as e:
            raise ValidationError(f"--env-vars: invalid regular expression {raw_pattern!r}: {e}") from e

        return cls(pattern=pattern, invert=invert)

    def matches(self, text: str) -> bool:
        matched = self.pattern.search(text) is not None
        return not matched if self.invert else matched

    def __str__(self) -> str:
        return f"{'!' if self.invert else ''}{self.pattern.pattern}"


class Selector(pd.BaseModel):
    """What to fetch and how to display it.

    `namespace` is always resolved for namespaced kinds unless `all_namespaces` is set,
    and is always None for cluster scoped kinds.
    """

    model_config = pd.ConfigDict(frozen=True)

    kind: ResourceKind
    namespace: Optional[str] = None
    all_namespaces: bool = False
    name: Optional[str] = None
    node: Optional[str] = None
    show_labels: bool = False
    show_annotations: bool = False
    output_mode: OutputMode = OutputMode.normal
    env_vars_filter: Optional[EnvVarsFilter] = None

    @pd.model_validator(mode="after")
    def validate_scope(self) -> Selector:
        if not self.namespaced:
            if self.namespace is not None or self.all_namespaces:
                raise ValidationError(f"{self.kind.plural.capitalize()} are cluster scoped and take no namespace")
            return self

        if self.all_namespaces and self.name is not None:
            raise ValidationError(f"A {self.kind.value.lower()} name needs a single namespace, not all namespaces")
        if self.all_namespaces == (self.namespace is not None):
            raise ValidationError("Exactly one of a namespace or all namespaces must be selected")
        return self

    @property
    def namespaced(self) -> bool:
        return self.kind == ResourceKind.Pod

    @property
    def wide(self) -> bool:
        return self.output_mode == OutputMode.wide

    def __str__(self) -> str:
        scope = "all namespaces" if self.all_namespaces else self.namespace or "cluster"
        parts = [f"{self.kind.value} in {scope}"]
        if self.name is not None:
            parts.append(f"name={self.name}")
        if self.node is not None:
            parts.append(f"node={self.node}")
        if self.env_vars_filter is not None:
            parts.append(f"env-vars={self.env_vars_filter}")
        parts.append(f"output={self.output_mode.value}")
        return ", ".join(parts)


def build_selector(
    kind: ResourceKind,
    *,
    default_namespace: str,
    namespace: Optional[str] = None,
    all_namespaces: bool = False,
    name: Optional[str] = None,
    node: Optional[str] = None,
    show_labels: bool = False,
    show_annotations: bool = False,
    output_mode: OutputMode = OutputMode.normal,
    env_vars: Optional[str] = None,
) -> Selector:
    """Validate user supplied filters and resolve them into a Selector.

    Raises:
        ValidationError: if the filters do not resolve to a single, unambiguous scope.
    """

    if kind == ResourceKind.Node:
        if node is not None:
            logger.debug(f"Ignoring node filter {node!r}: nodes cannot be filtered by node")
        if env_vars is not None:
            logger.debug("Ignoring --env-vars: nodes have no containers")

        return Selector(
            kind=kind,
            name=name,
            show_labels=show_labels,
            show_annotations=show_annotations,
            output_mode=output_mode,
        )

    if all_namespaces and name is not None:
        raise ValidationError(
            f"A {kind.value.lower()} name cannot be combined with --all-namespaces. "
            "Use --namespace to select the namespace that contains it."
        )

    if all_namespaces and namespace is not None:
        raise ValidationError("--namespace and --all-namespaces are mutually exclusive, pass only one of them.")

    return Selector(
        kind=kind,
        namespace=None if all_namespaces else namespace or default_namespace,
        all_namespaces=all_namespaces,
        name=name,
        node=node,
        show_labels=show_labels,
        show_annotations=show_annotations,
        output_mode=output_mode,
        env_vars_filter=EnvVarsFilter.parse(env_vars) if env_vars is not None else None,
    )
