import pandas as pd
import logging
import matplotlib
import matplotlib.pyplot as plt
from pathlib import Path
from typing import Optional, List, Union

from utils.exceptions import DataValidationError, SchemaMismatchError, TrainingDataNotFoundError
from utils import constants

class DataManager:
    """
    Manages loading and validation of element attribute CSV files.

    Every attribute is read as text; empty cells become empty strings so the
    featurizers never see NaN.
    """

    def __init__(self, config: dict, logger: logging.Logger):
        self.config = config
        self.logger = logger
        self.data: Optional[pd.DataFrame] = None
        self.separator = self.config.get('data', {}).get('separator', ',')
        self.base_dir = Path(self.config.get('outputs', {}).get('base_results_dir', 'results'))

    def execute(self, file_path: Union[str, Path], require_label: bool = True) -> pd.DataFrame:
        """
        Load and validate a data file.

        Args:
            file_path: Path to the comma-separated file with a header row.
            require_label: Whether the label column must be present (False for inference input).

        Returns:
            pd.DataFrame: The validated dataset restricted to the schema columns.
        """
        self.logger.info("Starting Data Manager execution...")
        self.load_data(file_path)
        required = constants.EXPECTED_COLUMNS if require_label else constants.FEATURE_COLUMNS
        self.validate_columns(required)
        self.normalize_missing(required)
        if require_label:
            self.drop_unlabelled_rows()
        self.data = self.data[[c for c in constants.EXPECTED_COLUMNS if c in self.data.columns]]
        return self.data

    @staticmethod
    def ensure_exists(file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        if not path.is_file():
            raise TrainingDataNotFoundError(f"File {file_path} doesn't exist.")
        return path

    def load_data(self, file_path: Union[str, Path]) -> pd.DataFrame:
        """Load the CSV with every column typed as string."""
        path = self.ensure_exists(file_path)
        self.logger.info(f"Loading data from {path}")

        try:
            self.data = pd.read_csv(path, sep=self.separator, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError as e:
            raise DataValidationError(f"Data file is empty: {path}") from e
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise DataValidationError(f"Failed to load data: {str(e)}") from e

        if self.data.empty:
            raise DataValidationError("Loaded dataframe is empty.")

        self.data.columns = [str(c).strip() for c in self.data.columns]
        self.logger.info(f"Data loaded successfully. Shape: {self.data.shape}")
        return self.data

    def validate_columns(self, required: List[str]) -> None:
        """Ensure the header carries every schema column."""
        if self.data is None or self.data.empty:
            raise DataValidationError("Dataframe is empty or None.")

        missing = [col for col in required if col not in self.data.columns]
        if missing:
            raise SchemaMismatchError(f"Missing required columns in dataset: {missing}")

        extra = [col for col in self.data.columns if col not in constants.EXPECTED_COLUMNS]
        if extra:
            self.logger.warning(f"Ignoring columns outside the element schema: {extra}")

    def normalize_missing(self, columns: List[str]) -> pd.DataFrame:
        """Replace missing cells with empty strings and report per-column counts."""
        stats = []
        for col in columns:
            empty_count = int((self.data[col].fillna('').str.strip() == '').sum())
            stats.append({'column': col, 'empty_count': empty_count})
            if empty_count > 0:
                self.logger.debug(f"Column '{col}' has {empty_count} empty values.")

        self.data[columns] = self.data[columns].fillna('').astype(str)
        return pd.DataFrame(stats)

    def drop_unlabelled_rows(self) -> int:
        """
        Drop rows whose label is blank. A blank label is a missing value, not a
        class of its own.

        Returns:
            Number of rows dropped.
        """
        blank = self.data[constants.LABEL_COLUMN].str.strip() == ''
        dropped = int(blank.sum())
        if dropped:
            self.data = self.data[~blank]
            self.logger.warning(f"Dropped {dropped} rows with an empty '{constants.LABEL_COLUMN}' value.")
        if self.data.empty:
            raise DataValidationError(f"No rows with a non-empty '{constants.LABEL_COLUMN}' value.")
        return dropped

    def generate_reports(self, output_dir: Optional[Path] = None) -> Path:
        """Plot the label distribution of the loaded dataset."""
        if self.data is None or constants.LABEL_COLUMN not in self.data.columns:
            raise DataValidationError("No labelled data loaded to report on.")

        output_dir = Path(output_dir) if output_dir else self.base_dir / constants.DATA_REPORT_DIR
        output_dir.mkdir(parents=True, exist_ok=True)

        matplotlib.use('Agg')
        counts = self.data[constants.LABEL_COLUMN].value_counts()
        plt.figure(figsize=(10, 6))
        plt.bar(counts.index.astype(str), counts.values, color='skyblue', edgecolor='black', alpha=0.7)
        plt.title('Element Label Distribution')
        plt.xlabel(constants.LABEL_COLUMN)
        plt.ylabel('Count')
        plt.xticks(rotation=45, ha='right')
        plt.tight_layout()
        plot_path = output_dir / "label_distribution.png"
        plt.savefig(plot_path)
        plt.close()

        self.logger.info(f"Label distribution ({counts.size} classes) saved to {plot_path}")
        return plot_path
