import joblib
import logging
from pathlib import Path
from typing import Optional, Union

from modules.base.base_engine import BaseEngine
from modules.data_manager import DataManager
from modules.evaluation_engine import MulticlassMetrics
from modules.feature_pipeline import resolve_feature_params
from modules.model_factory import AlgorithmConfig
from modules.split_engine import SplitEngine, TrainTestData
from modules.training_engine.backend import ClassifierBackend, SklearnClassifierBackend
from modules.training_engine.trained_model import TrainedModel
from utils.error_handling import handle_engine_errors
from utils.exceptions import (
    DataValidationError,
    ModelNotFittedError,
    ModelPersistenceError,
    ModelTrainingError,
    PredictionError,
)
from utils import constants


class Trainer(BaseEngine):
    """
    Trains, evaluates and saves an element classification model.

    The workflow is fixed: load -> split -> featurize -> train on fit(), then
    evaluate() against the held-out split and save() the fitted pipeline.
    Which classifier is trained is decided by the AlgorithmConfig, not by
    subclassing.

    Not safe for concurrent use; callers sharing an instance must serialize
    access to fit/evaluate/save.
    """

    def __init__(self, config: dict, logger: logging.Logger,
                 algorithm: Optional[AlgorithmConfig] = None,
                 backend: Optional[ClassifierBackend] = None):
        super().__init__(config, logger)
        self.algorithm = algorithm or AlgorithmConfig.from_config(config)
        seeds = self.config.get('_internal_seeds', {})
        model_seed = seeds.get('model', self.config.get('splitting', {}).get('seed', constants.DEFAULT_SEED) + 2000)
        self.backend = backend or SklearnClassifierBackend(
            self.algorithm,
            feature_params=resolve_feature_params(config),
            seed=model_seed,
            top_k=self.config.get('evaluation', {}).get('top_k', constants.DEFAULT_TOP_K),
            logger=logger,
        )
        self.model_file_name = self.config.get('outputs', {}).get('model_file_name', constants.MODEL_FILE)

        self._data_split: Optional[TrainTestData] = None
        self._trained_model: Optional[TrainedModel] = None
        self._training_file: Optional[Path] = None

    def _get_engine_directory_name(self) -> str:
        return constants.MODEL_DIR

    @property
    def name(self) -> str:
        return self.algorithm.display_name

    @property
    def model_path(self) -> Path:
        return self.base_dir / self.model_file_name

    @property
    def is_fitted(self) -> bool:
        return self._trained_model is not None

    @property
    def split(self) -> TrainTestData:
        self._require_fitted("access the data split")
        return self._data_split

    @property
    def trained_model(self) -> TrainedModel:
        self._require_fitted("access the trained model")
        return self._trained_model

    @handle_engine_errors("Training", ModelTrainingError, translate={OSError: DataValidationError})
    def fit(self, training_file_path: Union[str, Path]) -> None:
        """
        Train the model on the given CSV file.

        Previously trained state is replaced only once training succeeds.

        Raises:
            TrainingDataNotFoundError: the file does not exist.
            SchemaMismatchError: required columns are missing.
            DataValidationError: the file is unreadable, malformed or has no labelled rows.
            ModelTrainingError: the classifier could not be fitted.
        """
        DataManager.ensure_exists(training_file_path)
        self.logger.info(f"Starting {self.name} training on {training_file_path}...")

        data = DataManager(self.config, self.logger).execute(training_file_path)
        data_split = SplitEngine(self.config, self.logger).execute(data)

        train = data_split.train
        trained_model = self.backend.fit(train[constants.FEATURE_COLUMNS], train[constants.LABEL_COLUMN])

        self._data_split = data_split
        self._trained_model = trained_model
        self._training_file = Path(training_file_path)

    @handle_engine_errors("Evaluation", PredictionError)
    def evaluate(self) -> MulticlassMetrics:
        """
        Evaluate the trained model on the held-out test split.

        Returns:
            MulticlassMetrics for the test split.
        """
        self._require_fitted("evaluate")
        test = self._data_split.test
        self.logger.info(f"Evaluating {self.name} on {len(test)} test samples...")
        metrics = self.backend.evaluate(
            self._trained_model, test[constants.FEATURE_COLUMNS], test[constants.LABEL_COLUMN]
        )
        self.logger.info(
            f"Evaluation complete. MicroAccuracy: {metrics.micro_accuracy:.4f}, LogLoss: {metrics.log_loss:.4f}"
        )
        return metrics

    @handle_engine_errors("Model Saving", ModelPersistenceError)
    def save(self) -> Path:
        """
        Save the trained model, with its schema, to the model path.

        Returns:
            Path of the written artifact.
        """
        self._require_fitted("save")
        path = self.model_path
        if self._training_file is not None and path.resolve() == self._training_file.resolve():
            self.logger.warning(f"Model path {path} is the training data file; it will be overwritten.")

        path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self._trained_model, path)

        self.logger.info(f"Model saved to {path}")
        return path

    def execute(self, training_file_path: Union[str, Path]) -> MulticlassMetrics:
        """Run fit -> evaluate -> save and return the test metrics."""
        self.fit(training_file_path)
        metrics = self.evaluate()
        self.save()
        return metrics

    def _require_fitted(self, action: str) -> None:
        if self._trained_model is None:
            raise ModelNotFittedError(f"Cannot {action}: {self.name} has not been fitted. Call fit() first.")
