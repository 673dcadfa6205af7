import os
import logging
from typing import Dict, List, Optional, Union
import pandas as pd
from pathlib import Path

logger = logging.getLogger(__name__)

class FileLoader:
    """Loads exported ledger sheets as rows of text."""

    SUPPORTED_EXTENSIONS = {'.csv', '.xlsx', '.xls'}

    def __init__(self, sheet_name: Optional[Union[str, int]] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.sheet_name = sheet_name

    def load_rows(self, file_path: Union[str, Path]) -> List[Dict[str, str]]:
        """
        Load a ledger file and return its rows keyed by column name.

        Every cell is kept as text; parsing is left to the engine.

        Args:
            file_path: Path to the ledger file

        Returns:
            List of dicts mapping column name to cell text
        """
        file_path = str(file_path)
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        file_ext = Path(file_path).suffix.lower()

        if file_ext not in self.SUPPORTED_EXTENSIONS:
            raise ValueError(f"Unsupported file type: {file_ext}")

        self.logger.info(f"Loading {file_ext} file: {file_path}")

        if file_ext == '.csv':
            df = self._load_csv(file_path)
        else:
            df = self._load_excel(file_path)

        return self._to_rows(df)

    def _load_csv(self, file_path: str) -> pd.DataFrame:
        """Load CSV file with robust encoding detection."""
        encodings = ['utf-8', 'utf-8-sig', 'latin1', 'cp1252']

        for encoding in encodings:
            try:
                df = pd.read_csv(file_path, encoding=encoding, dtype=str,
                                 keep_default_na=False, skip_blank_lines=True)
                self.logger.info(f"Successfully loaded CSV with {encoding} encoding")
                return df
            except UnicodeDecodeError:
                continue

        raise ValueError(f"Could not decode CSV file with any of the tried encodings: {encodings}")

    def _load_excel(self, file_path: str) -> pd.DataFrame:
        """Load one sheet of an Excel workbook."""
        try:
            sheet = self.sheet_name if self.sheet_name is not None else 0
            df = pd.read_excel(file_path, sheet_name=sheet, dtype=str)
            self.logger.info(f"Using sheet: {sheet}")
            return df.fillna('')
        except Exception as e:
            raise ValueError(f"Error reading Excel file: {str(e)}")

    def _to_rows(self, df: pd.DataFrame) -> List[Dict[str, str]]:
        df.columns = df.columns.astype(str).str.strip()
        df = df.fillna('')

        # Drop rows that are blank in every column
        if len(df) > 0:
            blank = df.apply(lambda row: all(not str(val).strip() for val in row), axis=1)
            df = df[~blank]

        rows = df.to_dict(orient='records')
        self.logger.info(f"Loaded {len(rows)} rows")
        return rows
