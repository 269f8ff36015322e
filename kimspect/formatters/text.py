from rich.cells import cell_len

from kimspect.core.abstract import formatters
from kimspect.core.models.result import Result

COLUMN_SEPARATOR = "   "


def _pad(text: str, width: int) -> str:
    return text + " " * (width - cell_len(text))


@formatters.register()
def text(result: Result) -> str:
    """Format the result as a plain fixed-width table.

    Every column is as wide as its widest line, header included.
    Cells spanning several lines make the whole row as tall as its tallest cell.
    """

    table = [[[header] for header in result.headers]]
    table += [[cell.split("\n") for cell in cells] for cells in result.cells()]

    widths = [max(cell_len(line) for row in table for line in row[i]) for i in range(len(result.columns))]

    lines = []
    for row in table:
        height = max(len(cell) for cell in row)
        for i in range(height):
            parts = [_pad(cell[i] if i < len(cell) else "", width) for cell, width in zip(row, widths)]
            lines.append(COLUMN_SEPARATOR.join(parts).rstrip())

    return "\n".join(lines)
