"""
Data Exporters

Write the report tables as CSV files and, optionally, as one Excel
workbook with a sheet per table.
"""

from typing import Dict, List, Optional
from pathlib import Path
import logging
import warnings
import pandas as pd

logger = logging.getLogger(__name__)

EXCEL_SHEET_LIMIT = 31


class ExcelExporter:
    """
    Export tables to one Excel file with multiple sheets.

    Attributes:
        filepath (Path): Output Excel file path
        sheets (Dict[str, Dict]): sheet_name -> {'data', 'index'}
    """

    def __init__(self, filepath: str):
        self.filepath = Path(filepath)
        self.sheets: Dict[str, Dict] = {}

    def add_sheet(self, sheet_name: str, data: pd.DataFrame, index: bool = False) -> None:
        """
        Add a sheet to the workbook.

        Args:
            sheet_name: Name of the sheet (truncated to Excel's 31 characters)
            data: DataFrame to export
            index: Whether to include the DataFrame index
        """
        if not isinstance(data, pd.DataFrame):
            raise ValueError(f"Data must be a pandas DataFrame, got {type(data)}")

        if len(sheet_name) > EXCEL_SHEET_LIMIT:
            original_name = sheet_name
            sheet_name = sheet_name[:EXCEL_SHEET_LIMIT]
            warnings.warn(
                f"Sheet name '{original_name}' truncated to '{sheet_name}' "
                f"(Excel limit: {EXCEL_SHEET_LIMIT} characters)"
            )

        self.sheets[sheet_name] = {'data': data, 'index': index}

    def write(self, auto_adjust_columns: bool = True, freeze_header: bool = True) -> Optional[Path]:
        """
        Write all sheets with openpyxl.

        Returns:
            Path written, or None if there was nothing to write
        """
        if not self.sheets:
            warnings.warn("No sheets to write")
            return None

        self.filepath.parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(self.filepath, engine='openpyxl') as writer:
            for sheet_name, sheet_info in self.sheets.items():
                sheet_info['data'].to_excel(writer, sheet_name=sheet_name, index=sheet_info['index'])
                worksheet = writer.sheets[sheet_name]

                if auto_adjust_columns:
                    for column in worksheet.columns:
                        max_length = max(
                            (len(str(cell.value)) for cell in column if cell.value is not None),
                            default=0
                        )
                        worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

                if freeze_header:
                    worksheet.freeze_panes = 'A2'

        logger.info(f"Excel report written: {self.filepath} ({len(self.sheets)} sheets)")
        return self.filepath

    def clear(self) -> None:
        """Clear all sheets."""
        self.sheets.clear()


class CSVExporter:
    """Export tables as individual CSV files in one directory."""

    def __init__(self, output_directory: str):
        self.output_directory = Path(output_directory)
        self.output_directory.mkdir(parents=True, exist_ok=True)

    def export_table(self, data: pd.DataFrame, filename: str, index: bool = False) -> Path:
        """
        Write one table.

        Args:
            data: Table to write
            filename: File name inside the output directory ('.csv' appended if missing)
            index: Whether to include the DataFrame index
        """
        if not filename.endswith('.csv'):
            filename = f"{filename}.csv"
        filepath = self.output_directory / filename
        data.to_csv(filepath, index=index)
        logger.debug(f"Exported {len(data)} rows to {filepath}")
        return filepath


class ResultsExporter:
    """
    Write every report table.

    CSV files are always written; the Excel workbook is optional.

    Args:
        output_directory: Report folder
        excel: Also write report.xlsx with one sheet per table
        workbook_name: Excel file name
    """

    def __init__(self, output_directory: str, excel: bool = False, workbook_name: str = 'report.xlsx'):
        self.output_directory = Path(output_directory)
        self.excel = excel
        self.workbook_name = workbook_name

    def export(self, tables: Dict[str, pd.DataFrame]) -> List[Path]:
        """
        Export named tables.

        Args:
            tables: table name -> DataFrame (name used for file and sheet)

        Returns:
            Paths written
        """
        csv_exporter = CSVExporter(str(self.output_directory))
        written = [csv_exporter.export_table(df, name) for name, df in tables.items()]

        if self.excel:
            workbook = ExcelExporter(str(self.output_directory / self.workbook_name))
            for name, df in tables.items():
                workbook.add_sheet(name, df)
            path = workbook.write()
            if path is not None:
                written.append(path)

        logger.info(f"Exported {len(written)} report file(s) to {self.output_directory}")
        return written
