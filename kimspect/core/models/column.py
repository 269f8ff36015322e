from __future__ import annotations

import enum

import pydantic as pd

from kimspect.core.models.row import Row
from kimspect.utils.human_duration import format_age

NONE_LITERAL = "<none>"
VALUE_FROM_LITERAL = "<valueFrom>"


class ColumnSource(str, enum.Enum):
    field = "field"
    label = "label"
    annotation = "annotation"
    # Combined `key=value` notation, one pair per line
    labels = "labels"
    annotations = "annotations"
    containers = "containers"
    env_vars = "env_vars"


class Column(pd.BaseModel):
    model_config = pd.ConfigDict(frozen=True)

    header: str
    source: ColumnSource
    key: str = ""

    @classmethod
    def for_field(cls, header: str, field: str) -> Column:
        return cls(header=header, source=ColumnSource.field, key=field)

    @classmethod
    def for_label(cls, key: str) -> Column:
        return cls(header=key.upper(), source=ColumnSource.label, key=key)

    @classmethod
    def for_annotation(cls, key: str) -> Column:
        return cls(header=key.upper(), source=ColumnSource.annotation, key=key)

    @property
    def dynamic(self) -> bool:
        return self.source in (ColumnSource.label, ColumnSource.annotation)

    def qualified(self) -> Column:
        """The same column headed `LABEL:<key>` or `ANNOTATION:<key>`, keeping the key's case."""

        if not self.dynamic:
            return self
        return self.model_copy(update={"header": f"{self.source.value.upper()}:{self.key}"})

    def render(self, row: Row) -> str:
        """Render the cell of this column for the given row. Cells may span several lines."""

        if self.source == ColumnSource.field:
            if self.key == "age":
                return format_age(row.age)
            value = getattr(row, self.key)
            return NONE_LITERAL if value is None else str(value)

        if self.source == ColumnSource.label:
            return row.labels.get(self.key, NONE_LITERAL)
        if self.source == ColumnSource.annotation:
            return row.annotations.get(self.key, NONE_LITERAL)

        if self.source == ColumnSource.labels:
            return _format_metadata(row.labels)
        if self.source == ColumnSource.annotations:
            return _format_metadata(row.annotations)

        containers, env_vars = _format_containers(row.containers)
        return containers if self.source == ColumnSource.containers else env_vars


def _format_metadata(metadata: dict[str, str]) -> str:
    if not metadata:
        return NONE_LITERAL

    return "\n".join(f"{key}={metadata[key]}" for key in sorted(metadata))


def _format_containers(containers: dict[str, dict[str, str]]) -> tuple[str, str]:
    """Lay out containers and their env vars side by side.

    The container name sits on the first line of its block and is padded with empty lines,
    so that the next container starts on the same line as its first env var.
    """

    if not containers:
        return NONE_LITERAL, NONE_LITERAL

    container_lines: list[str] = []
    env_lines: list[str] = []

    for container_name, env_vars in containers.items():
        block = [line for key, value in env_vars.items() for line in f"{key}={value}".split("\n")]
        if not block:
            block = [NONE_LITERAL]

        container_lines.append(container_name)
        container_lines.extend([""] * (len(block) - 1))
        env_lines.extend(block)

    return "\n".join(container_lines), "\n".join(env_lines)
