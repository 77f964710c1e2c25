from .split_engine import SplitEngine, TrainTestData

__all__ = ['SplitEngine', 'TrainTestData']
