import abc
import logging
import time
import numpy as np
import pandas as pd
from typing import Any, Dict, Optional
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import LabelEncoder

from modules.evaluation_engine import MulticlassMetrics, compute_multiclass_metrics, empty_multiclass_metrics
from modules.feature_pipeline import build_feature_pipeline, prepare_features
from modules.model_factory import AlgorithmConfig, ModelFactory
from modules.training_engine.trained_model import TrainedModel
from utils.exceptions import ModelTrainingError, PredictionError
from utils import constants


class ClassifierBackend(abc.ABC):
    """
    Capability interface the Trainer relies on. Any classification library can
    back the Trainer by implementing these three operations.
    """

    @abc.abstractmethod
    def fit(self, features: pd.DataFrame, labels: pd.Series) -> TrainedModel:
        raise NotImplementedError

    @abc.abstractmethod
    def predict(self, model: TrainedModel, features: pd.DataFrame) -> np.ndarray:
        raise NotImplementedError

    @abc.abstractmethod
    def evaluate(self, model: TrainedModel, features: pd.DataFrame, labels: pd.Series) -> MulticlassMetrics:
        raise NotImplementedError


class SklearnClassifierBackend(ClassifierBackend):
    """scikit-learn implementation: featurize with the fixed pipeline, then classify."""

    def __init__(self, algorithm: AlgorithmConfig, feature_params: Optional[Dict[str, Any]] = None,
                 seed: Optional[int] = None, top_k: int = constants.DEFAULT_TOP_K,
                 logger: Optional[logging.Logger] = None):
        self.algorithm = algorithm
        self.feature_params = feature_params or {}
        self.seed = seed
        self.top_k = top_k
        self.logger = logger or logging.getLogger(__name__)

    def fit(self, features: pd.DataFrame, labels: pd.Series) -> TrainedModel:
        labels = pd.Series(labels).astype(str)
        n_classes = labels.nunique()
        if n_classes < 2:
            raise ModelTrainingError(
                f"At least 2 distinct '{constants.LABEL_COLUMN}' values are required for training, got {n_classes}."
            )

        # Map label values to integer keys
        label_encoder = LabelEncoder()
        keys = label_encoder.fit_transform(labels)

        classifier = ModelFactory.create(self.algorithm.name, self.algorithm.params, seed=self.seed)
        pipeline = Pipeline([
            (constants.FEATURES_COLUMN, build_feature_pipeline(self.feature_params)),
            ('classifier', classifier),
        ])

        self.logger.info(
            f"Training {self.algorithm.display_name} on {len(labels)} samples, "
            f"{len(constants.FEATURE_COLUMNS)} text columns, {n_classes} classes."
        )
        start_time = time.time()
        try:
            pipeline.fit(prepare_features(features), keys)
        except (ValueError, TypeError, MemoryError) as e:
            raise ModelTrainingError(f"Failed to train model: {str(e)}") from e
        duration = time.time() - start_time
        self.logger.info(f"Training completed in {duration:.2f} seconds.")

        schema = {
            'feature_columns': list(constants.FEATURE_COLUMNS),
            'label_column': constants.LABEL_COLUMN,
            'classes': [str(c) for c in label_encoder.classes_],
            'algorithm': self.algorithm.name,
            'algorithm_params': dict(self.algorithm.params),
            'feature_params': dict(self.feature_params),
            'training_rows': int(len(labels)),
            'training_time_sec': duration,
            'timestamp': time.strftime("%Y-%m-%d %H:%M:%S"),
        }
        return TrainedModel(pipeline=pipeline, label_encoder=label_encoder, schema=schema)

    def predict(self, model: TrainedModel, features: pd.DataFrame) -> np.ndarray:
        try:
            return model.predict(features)
        except (ValueError, KeyError) as e:
            raise PredictionError(f"Prediction failed: {e}") from e

    def evaluate(self, model: TrainedModel, features: pd.DataFrame, labels: pd.Series) -> MulticlassMetrics:
        labels = pd.Series(labels, index=features.index).astype(str)
        seen = labels.isin(set(model.classes_))
        unseen_count = int((~seen).sum())
        if unseen_count:
            self.logger.warning(f"{unseen_count} rows have labels not seen during training and are excluded.")

        features, labels = features[seen], labels[seen]
        if features.empty:
            self.logger.warning("No test rows could be scored; reporting every row as misclassified.")
            return empty_multiclass_metrics(model.classes_, top_k=self.top_k, unseen_label_count=unseen_count)

        try:
            proba = model.predict_proba(features)
        except (ValueError, KeyError) as e:
            raise PredictionError(f"Prediction failed: {e}") from e
        y_pred = model.label_encoder.inverse_transform(proba.argmax(axis=1))

        return compute_multiclass_metrics(
            labels.to_numpy(),
            y_pred,
            proba,
            classes=model.classes_,
            top_k=self.top_k,
            unseen_label_count=unseen_count,
        )
