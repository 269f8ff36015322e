from .json import json
from .table import table
from .text import text
from .yaml import yaml

__all__ = ["json", "table", "text", "yaml"]
