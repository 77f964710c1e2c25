import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.preprocessing import LabelEncoder

from modules.feature_pipeline import prepare_features
from utils import constants


class TrainedModel(ClassifierMixin, BaseEstimator):
    """
    A fitted element classifier: the featurize-then-classify pipeline, the
    label key mapping and the schema it was trained against.

    This is the object written to disk by Trainer.save() and read back by
    PredictionEngine.load().
    """

    def __init__(self, pipeline=None, label_encoder: Optional[LabelEncoder] = None,
                 schema: Optional[Dict[str, Any]] = None):
        self.pipeline = pipeline
        self.label_encoder = label_encoder
        self.schema = schema

    @property
    def classes_(self) -> np.ndarray:
        return self.label_encoder.classes_

    @property
    def algorithm(self) -> str:
        return (self.schema or {}).get('algorithm', '')

    @property
    def feature_columns(self) -> List[str]:
        return list((self.schema or {}).get('feature_columns', constants.FEATURE_COLUMNS))

    def predict_keys(self, df: pd.DataFrame) -> np.ndarray:
        """Predicted integer label keys."""
        return self.pipeline.predict(prepare_features(df))

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        """Predicted element labels, mapped back from keys to values."""
        return self.label_encoder.inverse_transform(self.predict_keys(df))

    def predict_proba(self, df: pd.DataFrame) -> np.ndarray:
        """
        Class probabilities with one column per entry of classes_.

        Classifiers only emit columns for keys they saw while fitting, which is
        every key since the encoder is fitted on the same labels.
        """
        return self.pipeline.predict_proba(prepare_features(df))

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Append PredictedLabel and Score (top class probability) to a copy of df."""
        proba = self.predict_proba(df)
        result = df.copy()
        result[constants.PREDICTED_LABEL_COLUMN] = self.label_encoder.inverse_transform(proba.argmax(axis=1))
        result[constants.SCORE_COLUMN] = proba.max(axis=1)
        return result
