"""
SplitEngine for the Element Classification Pipeline.

Partitions a loaded element dataset into training and test sets. The split is
seeded so the same file and seed always yield the same membership, and the
original row index is preserved so membership can be audited.
"""
import pandas as pd
import logging
from typing import NamedTuple, Optional
from sklearn.model_selection import train_test_split
from modules.base.base_engine import BaseEngine
from utils.error_handling import handle_engine_errors
from utils.exceptions import DataValidationError
from utils.file_io import save_dataframe
from utils import constants


class TrainTestData(NamedTuple):
    train: pd.DataFrame
    test: pd.DataFrame


class SplitEngine(BaseEngine):
    """
    Splits data into Train/Test sets.

    Splitting is random by default. When 'splitting.stratify' is enabled the
    label column is used as the stratification key, falling back to a random
    split if any label has too few rows to appear on both sides.

    Either way every label ends up with at least one training row, so a file
    with two or more labels always yields a trainable split.
    """

    # A label needs one row on each side of the split to be stratifiable.
    MIN_SAMPLES_FOR_STRATIFY = 2

    def __init__(self, config: dict, logger: logging.Logger):
        super().__init__(config, logger)
        split_cfg = self.config.get('splitting', {})
        self.test_size = split_cfg.get('test_size', constants.DEFAULT_TEST_SIZE)
        self.seed = self.config.get('_internal_seeds', {}).get('split', split_cfg.get('seed', constants.DEFAULT_SEED))
        self.stratify = split_cfg.get('stratify', False)

    def _get_engine_directory_name(self) -> str:
        return constants.SPLITS_DIR

    def _writes_artifacts(self) -> bool:
        return self.config.get('outputs', {}).get('save_splits', False)

    @handle_engine_errors("Data Splitting", DataValidationError)
    def execute(self, df: pd.DataFrame) -> TrainTestData:
        """
        Execute the splitting workflow.

        Returns:
            TrainTestData with train and test DataFrames.
        """
        self.logger.info("Starting Split Engine execution...")

        if len(df) < 2:
            raise DataValidationError(f"At least 2 rows are required to split data, got {len(df)}.")

        stratify_col = self._determine_stratification_strategy(df)
        train, test = self._perform_split(df, stratify_col)
        train, test = self._cover_labels_in_train(train, test)

        if self._writes_artifacts():
            self._save_splits(train, test)

        self.logger.info(f"Splits created: Train={len(train)}, Test={len(test)} (seed={self.seed})")
        return TrainTestData(train=train, test=test)

    def _determine_stratification_strategy(self, df: pd.DataFrame) -> Optional[str]:
        if not self.stratify:
            return None
        if constants.LABEL_COLUMN not in df.columns:
            self.logger.warning("Label column missing. Using random splitting.")
            return None

        counts = df[constants.LABEL_COLUMN].value_counts()
        rare = (counts < self.MIN_SAMPLES_FOR_STRATIFY).sum()
        if rare:
            self.logger.warning(
                f"{rare} labels have < {self.MIN_SAMPLES_FOR_STRATIFY} samples. Cannot stratify safely. Using random splitting."
            )
            return None

        self.logger.info(f"Using '{constants.LABEL_COLUMN}' for stratification.")
        return constants.LABEL_COLUMN

    def _perform_split(self, df: pd.DataFrame, strat_col: Optional[str]):
        stratify_target = df[strat_col] if strat_col else None
        try:
            return train_test_split(
                df,
                test_size=self.test_size,
                random_state=self.seed,
                shuffle=True,
                stratify=stratify_target
            )
        except ValueError as e:
            if strat_col is None:
                raise
            # Too few rows per class for the requested test size
            self.logger.error(f"Stratification failed: {e}. Falling back to random split.")
            return train_test_split(df, test_size=self.test_size, random_state=self.seed, shuffle=True)

    def _cover_labels_in_train(self, train: pd.DataFrame, test: pd.DataFrame):
        """
        Move one test row into training for every label the split left out of
        training, and send back the same number of rows from labels that keep
        at least one training row. Split sizes are kept whenever such rows exist.
        """
        if constants.LABEL_COLUMN not in train.columns:
            return train, test

        train_labels = set(train[constants.LABEL_COLUMN])
        first_per_label = test.groupby(constants.LABEL_COLUMN, sort=False).head(1)
        moved_in = first_per_label[~first_per_label[constants.LABEL_COLUMN].isin(train_labels)]
        if moved_in.empty:
            return train, test

        remaining = train[constants.LABEL_COLUMN].value_counts().to_dict()
        moved_out = []
        for idx, label in train[constants.LABEL_COLUMN].items():
            if len(moved_out) == len(moved_in):
                break
            if remaining[label] > 1:
                remaining[label] -= 1
                moved_out.append(idx)

        self.logger.warning(
            f"Labels {list(moved_in[constants.LABEL_COLUMN])} had no training rows after the split; "
            f"moved {len(moved_in)} test rows into training and {len(moved_out)} training rows into test."
        )
        new_train = pd.concat([train.drop(index=moved_out), moved_in])
        new_test = pd.concat([test.drop(index=moved_in.index), train.loc[moved_out]])
        if new_test.empty:
            self.logger.warning("Test split is empty: every row is needed to cover the labels in training.")
        return new_train, new_test

    def _save_splits(self, train: pd.DataFrame, test: pd.DataFrame) -> None:
        excel_copy = self.config.get("outputs", {}).get("save_excel_copy", False)
        save_dataframe(train, self.output_dir / "train.parquet", excel_copy=excel_copy, index_label=constants.ROW_ID_COLUMN)
        save_dataframe(test, self.output_dir / "test.parquet", excel_copy=excel_copy, index_label=constants.ROW_ID_COLUMN)
        self.logger.info(f"Splits saved to {self.output_dir}")
