import pytest
from unittest.mock import Mock

from utils.error_handling import handle_engine_errors
from utils.exceptions import (
    DataValidationError,
    ElementClassifierException,
    ModelPersistenceError,
    ModelTrainingError,
    SchemaMismatchError,
)


class DummyEngine:
    def __init__(self):
        self.logger = Mock()

    @handle_engine_errors("Dummy")
    def run(self, error):
        raise error


def test_project_errors_pass_through_unchanged():
    engine = DummyEngine()
    original = SchemaMismatchError("bad columns")

    with pytest.raises(SchemaMismatchError) as exc_info:
        engine.run(original)

    assert exc_info.value is original
    engine.logger.error.assert_not_called()


def test_unexpected_errors_are_wrapped_and_logged():
    engine = DummyEngine()

    with pytest.raises(ElementClassifierException, match="Dummy failed: boom") as exc_info:
        engine.run(RuntimeError("boom"))

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    engine.logger.error.assert_called_once()


class SavingEngine:
    def __init__(self):
        self.logger = Mock()

    @handle_engine_errors("Model Saving", ModelPersistenceError)
    def save(self, error):
        raise error

    @handle_engine_errors("Training", ModelTrainingError, translate={OSError: DataValidationError})
    def fit(self, error):
        raise error


def test_declared_error_type_replaces_root():
    engine = SavingEngine()

    with pytest.raises(ModelPersistenceError, match="Model Saving failed: disk full") as exc_info:
        engine.save(OSError("disk full"))

    assert isinstance(exc_info.value, OSError)
    assert isinstance(exc_info.value.__cause__, OSError)
    engine.logger.error.assert_called_once()


def test_value_error_in_training_becomes_training_error():
    engine = SavingEngine()

    with pytest.raises(ModelTrainingError, match="Training failed: bad input"):
        engine.fit(ValueError("bad input"))


def test_translated_builtin_uses_mapped_type():
    engine = SavingEngine()

    with pytest.raises(DataValidationError, match="Training failed: permission denied") as exc_info:
        engine.fit(PermissionError("permission denied"))

    assert not isinstance(exc_info.value, ModelTrainingError)


def test_project_errors_ignore_mapping():
    engine = SavingEngine()
    original = SchemaMismatchError("bad columns")

    with pytest.raises(SchemaMismatchError) as exc_info:
        engine.fit(original)

    assert exc_info.value is original
