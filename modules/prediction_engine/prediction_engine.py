import pandas as pd
import logging
from pathlib import Path
from typing import Optional, Union

from modules.data_manager import DataManager
from modules.training_engine.trained_model import TrainedModel
from utils.error_handling import handle_engine_errors
from utils.exceptions import ModelNotFittedError, PredictionError
from utils.model_loader import safe_load_model
from utils import constants

class PredictionEngine:
    """
    Loads a saved element classifier and generates predictions.
    Ensures the input carries the attribute columns the model was trained on.
    """

    def __init__(self, config: dict, logger: logging.Logger):
        self.config = config
        self.logger = logger
        outputs = self.config.get('outputs', {})
        self.model_path = Path(outputs.get('base_results_dir', 'results')) / outputs.get('model_file_name', constants.MODEL_FILE)
        self.model: Optional[TrainedModel] = None

    def load(self, path: Optional[Union[str, Path]] = None) -> TrainedModel:
        """Load a model artifact written by Trainer.save()."""
        model_path = Path(path) if path else self.model_path
        self.logger.info(f"Loading model from {model_path}")
        self.model = safe_load_model(model_path, TrainedModel)
        self.logger.info(
            f"Loaded {self.model.algorithm or 'model'} with {len(self.model.classes_)} classes: {list(self.model.classes_)}"
        )
        return self.model

    @handle_engine_errors("Prediction", PredictionError)
    def predict(self, data_df: pd.DataFrame) -> pd.DataFrame:
        """
        Generate predictions.

        Returns:
            Copy of data_df with PredictedLabel and Score columns appended.
        """
        if self.model is None:
            raise ModelNotFittedError("No model loaded. Call load() first.")

        missing = sorted(set(self.model.feature_columns) - set(data_df.columns))
        if missing:
            raise PredictionError(f"Missing features required by the model: {missing}")

        self.logger.info(f"Generating predictions for {len(data_df)} samples...")
        return self.model.transform(data_df)

    def execute(self, data_file_path: Union[str, Path]) -> pd.DataFrame:
        """Load a CSV of element attributes (label optional) and predict every row."""
        if self.model is None:
            self.load()
        data = DataManager(self.config, self.logger).execute(data_file_path, require_label=False)
        return self.predict(data)
