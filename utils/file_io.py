import pandas as pd
from pathlib import Path
from typing import Optional

# Excel caps worksheet names at 31 characters.
EXCEL_SHEET_NAME_LIMIT = 31


def save_dataframe(df: pd.DataFrame, path: Path, *, excel_copy: bool = False,
                   index_label: Optional[str] = None) -> Path:
    """
    Write a report table to Parquet, with an optional .xlsx copy beside it.

    With `index_label` the frame index is written as an ordinary column of that
    name, so split rows stay traceable to their source CSV row and confusion
    rows to their true label. Both files carry the same columns. Without it the
    index is dropped.

    Returns:
        Path of the Parquet file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table = df.rename_axis(index_label).reset_index() if index_label else df.reset_index(drop=True)
    table.to_parquet(path, index=False)

    if excel_copy:
        table.to_excel(path.with_suffix(".xlsx"), index=False,
                       sheet_name=path.stem[:EXCEL_SHEET_NAME_LIMIT])

    return path
