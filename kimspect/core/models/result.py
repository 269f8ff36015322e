from __future__ import annotations

from typing import Any, Callable

import pydantic as pd

from kimspect.core.models.column import Column
from kimspect.core.models.row import Row
from kimspect.core.models.selector import ResourceKind


class Result(pd.BaseModel):
    kind: ResourceKind
    columns: list[Column]
    rows: list[Row]

    @property
    def headers(self) -> list[str]:
        return [column.header for column in self.columns]

    def cells(self) -> list[list[str]]:
        return [[column.render(row) for column in self.columns] for row in self.rows]

    def records(self) -> list[dict[str, str]]:
        """Rows as header -> cell mappings, keeping the column order."""

        headers = self.headers
        duplicates = sorted({header for header in headers if headers.count(header) > 1})
        if duplicates:
            raise ValueError(f"Duplicate column headers would collapse cells: {', '.join(duplicates)}")

        return [dict(zip(headers, cells)) for cells in self.cells()]

    def format(self, formatter: Callable[[Result], Any]) -> Any:
        return formatter(self)
