from __future__ import annotations

import io

import pandas as pd
from openpyxl.utils import get_column_letter

from .service import ReportTable

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Excel rejects sheet titles longer than this.
_MAX_SHEET_TITLE = 31


def to_xlsx(table: ReportTable) -> io.BytesIO:
    df = pd.DataFrame(table.rows, columns=table.columns)
    sheet_name = table.title[:_MAX_SHEET_TITLE]

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        ws = writer.sheets[sheet_name]
        for i, column in enumerate(table.columns, start=1):
            width = max([len(str(column))] + [len(str(r[i - 1])) for r in table.rows])
            ws.column_dimensions[get_column_letter(i)].width = min(width + 2, 60)
    out.seek(0)
    return out
