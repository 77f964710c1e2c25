"""
Custom exception hierarchy for the Element Classification Pipeline.
"""

class ElementClassifierException(Exception):
    """Base exception for all system errors."""
    pass

class ConfigurationError(ElementClassifierException):
    """Configuration validation failed."""
    pass

class DataValidationError(ElementClassifierException):
    """Data validation failed."""
    pass

class TrainingDataNotFoundError(DataValidationError, FileNotFoundError):
    """Training data file does not exist."""
    pass

class SchemaMismatchError(DataValidationError):
    """Input columns do not match the expected element schema."""
    pass

class ModelTrainingError(ElementClassifierException):
    """Model training failed."""
    pass

class ModelNotFittedError(ElementClassifierException):
    """Operation requires a trained model but fit() has not completed."""
    pass

class ModelPersistenceError(ElementClassifierException, OSError):
    """Model artifact could not be written or read."""
    pass

class PredictionError(ElementClassifierException):
    """Prediction generation failed."""
    pass
