from __future__ import annotations

from datetime import timedelta
from typing import Optional

import pydantic as pd


class Row(pd.BaseModel):
    """One resource, normalized for rendering."""

    model_config = pd.ConfigDict(frozen=True)

    name: str
    namespace: Optional[str] = None
    node_name: Optional[str] = None
    status: Optional[str] = None
    age: Optional[timedelta] = None
    ip: Optional[str] = None
    version: Optional[str] = None
    # NOTE: Key order is whatever the API returned, it is only fixed when rendering
    labels: dict[str, str] = pd.Field(default_factory=dict)
    annotations: dict[str, str] = pd.Field(default_factory=dict)
    # container name -> env var name -> value, only filled for the env vars view
    containers: dict[str, dict[str, str]] = pd.Field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name
