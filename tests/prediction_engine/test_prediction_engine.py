import joblib
import pytest
import numpy as np
import pandas as pd
from sklearn.linear_model import LogisticRegression

from modules.prediction_engine import PredictionEngine
from modules.training_engine import Trainer
from utils.exceptions import ModelNotFittedError, ModelPersistenceError, PredictionError
from utils import constants


@pytest.fixture
def saved_model(base_config, mock_logger, element_csv):
    trainer = Trainer(base_config, mock_logger)
    trainer.fit(element_csv)
    trainer.save()
    return trainer


@pytest.fixture
def engine(base_config, mock_logger):
    return PredictionEngine(base_config, mock_logger)


def test_default_model_path(engine, tmp_path):
    assert engine.model_path == tmp_path / "results" / "data.csv"


def test_load_missing_artifact(engine):
    with pytest.raises(ModelPersistenceError, match="not found"):
        engine.load()


def test_load_rejects_foreign_object(engine, tmp_path):
    path = tmp_path / "foreign.joblib"
    joblib.dump(LogisticRegression(), path)

    with pytest.raises(ModelPersistenceError, match="Invalid model type"):
        engine.load(path)


def test_load_rejects_corrupt_file(engine, tmp_path):
    path = tmp_path / "corrupt.joblib"
    path.write_text("definitely not a pickle")

    with pytest.raises(ModelPersistenceError, match="Failed to load model"):
        engine.load(path)


def test_predict_before_load(engine, element_csv):
    with pytest.raises(ModelNotFittedError):
        engine.predict(pd.read_csv(element_csv))


def test_predict_adds_label_and_score(saved_model, engine):
    engine.load()
    test = saved_model.split.test

    result = engine.predict(test)

    assert constants.PREDICTED_LABEL_COLUMN in result.columns
    assert constants.SCORE_COLUMN in result.columns
    assert result[constants.SCORE_COLUMN].between(0, 1).all()
    assert set(result[constants.PREDICTED_LABEL_COLUMN]) <= set(saved_model.trained_model.classes_)
    np.testing.assert_array_equal(
        result[constants.PREDICTED_LABEL_COLUMN].to_numpy(), saved_model.trained_model.predict(test)
    )
    assert constants.PREDICTED_LABEL_COLUMN not in test.columns


def test_predict_missing_columns(saved_model, engine):
    engine.load()
    test = saved_model.split.test.drop(columns=["Role", "Href"])

    with pytest.raises(PredictionError, match=r"\['Href', 'Role'\]"):
        engine.predict(test)


def test_execute_on_unlabelled_file(saved_model, engine, make_element_csv):
    path = make_element_csv("unlabelled.csv", n_rows=12, seed=3, columns=constants.FEATURE_COLUMNS)

    result = engine.execute(path)

    assert len(result) == 12
    assert constants.LABEL_COLUMN not in result.columns
    assert result[constants.PREDICTED_LABEL_COLUMN].notna().all()
