from rich.table import Table
from rich.text import Text

from kimspect.core.abstract import formatters
from kimspect.core.models.column import ColumnSource
from kimspect.core.models.result import Result


@formatters.register(rich_console=True)
def table(result: Result) -> Table:
    """Format the result as a rich table."""

    table = Table(show_header=True, header_style="bold magenta", title_justify="left", box=None)

    for column in result.columns:
        table.add_column(column.header, style="cyan" if column.source == ColumnSource.field else None)

    for cells in result.cells():
        # NOTE: Text() keeps label values like `[x]` from being parsed as markup
        table.add_row(*[Text(cell) for cell in cells])

    return table
