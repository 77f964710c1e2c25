from .prediction_engine import PredictionEngine

__all__ = ['PredictionEngine']
