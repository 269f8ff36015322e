from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from kimspect.core.models.column import Column, ColumnSource
from kimspect.core.models.row import Row
from kimspect.core.models.selector import ResourceKind, Selector

FIXED_COLUMNS: dict[ResourceKind, list[Column]] = {
    ResourceKind.Pod: [
        Column.for_field("NAME", "name"),
        Column.for_field("NAMESPACE", "namespace"),
        Column.for_field("STATUS", "status"),
        Column.for_field("AGE", "age"),
    ],
    ResourceKind.Node: [
        Column.for_field("NAME", "name"),
        Column.for_field("STATUS", "status"),
        Column.for_field("AGE", "age"),
    ],
}

WIDE_COLUMNS: dict[ResourceKind, list[Column]] = {
    ResourceKind.Pod: [
        Column.for_field("NODE", "node_name"),
        Column.for_field("IP", "ip"),
    ],
    ResourceKind.Node: [
        Column.for_field("INTERNAL-IP", "ip"),
        Column.for_field("VERSION", "version"),
    ],
}

ENV_VARS_COLUMNS: list[Column] = [
    Column(header="CONTAINERS", source=ColumnSource.containers),
    Column(header="ENV VARS", source=ColumnSource.env_vars),
]

COMBINED_COLUMNS: list[Column] = [
    Column(header="LABELS", source=ColumnSource.labels),
    Column(header="ANNOTATIONS", source=ColumnSource.annotations),
]

# With both labels and annotations requested, more distinct keys than this
# switches to the combined `key=value` notation
MAX_PARALLEL_DYNAMIC_COLUMNS = 8


def distinct_keys(mappings: Iterable[dict[str, str]]) -> list[str]:
    return sorted({key for mapping in mappings for key in mapping})


def derive_columns(selector: Selector, rows: list[Row]) -> list[Column]:
    """
    Decide the columns to render. Dynamic columns depend on the keys observed
    across all of `rows`, so this can only run after the fetch.
    """

    columns = [
        column
        for column in FIXED_COLUMNS[selector.kind]
        # NOTE: Namespace is only informative when more than one namespace is shown
        if not (column.header == "NAMESPACE" and not selector.all_namespaces)
    ]

    if selector.wide:
        columns += WIDE_COLUMNS[selector.kind]

    if selector.kind == ResourceKind.Pod and selector.env_vars_filter is not None:
        columns += ENV_VARS_COLUMNS

    label_keys = distinct_keys(row.labels for row in rows) if selector.show_labels else []
    annotation_keys = distinct_keys(row.annotations for row in rows) if selector.show_annotations else []

    if (
        selector.show_labels
        and selector.show_annotations
        and len(label_keys) + len(annotation_keys) > MAX_PARALLEL_DYNAMIC_COLUMNS
    ):
        return columns + COMBINED_COLUMNS

    dynamic = [Column.for_label(key) for key in label_keys] + [Column.for_annotation(key) for key in annotation_keys]
    return columns + _disambiguate(columns, dynamic)


def _disambiguate(fixed: list[Column], dynamic: list[Column]) -> list[Column]:
    """
    Keep upper-cased key headers where they are unique. A header that clashes with a fixed column,
    or with another key once upper-cased, falls back to `LABEL:<key>` / `ANNOTATION:<key>`.
    Label and annotation keys never contain `:`, so the qualified headers are always unique.
    """

    taken = Counter(column.header for column in fixed + dynamic)
    return [column.qualified() if taken[column.header] > 1 else column for column in dynamic]
