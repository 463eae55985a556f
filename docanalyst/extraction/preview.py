"""Row preview rendering shared by the tabular extractors."""

CELL_SEPARATOR = " | "


def join_cells(cells: list[str]) -> str:
    """Join cell values with the preview separator."""
    return CELL_SEPARATOR.join(cells)


def render_data_rows(rows: list[list[str]], limit: int) -> list[str]:
    """
    Render a bounded preview of data rows.

    Args:
        rows: All data rows, as lists of cell strings
        limit: Maximum number of rows rendered individually

    Returns:
        Lines: a row-count heading, up to `limit` rows, and a remainder line
        when rows were left out
    """
    lines = [f"Data ({len(rows)} rows):"]

    for index, row in enumerate(rows[:limit], 1):
        lines.append(f"Row {index}: {join_cells(row)}")

    if len(rows) > limit:
        lines.append(f"... and {len(rows) - limit} more rows")

    return lines
