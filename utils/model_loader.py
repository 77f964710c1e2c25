import joblib
from pathlib import Path
from utils.exceptions import ModelPersistenceError

def safe_load_model(path: Path, expected_type: type):
    """Safely load model with validation."""
    path = Path(path)
    if not path.exists():
        raise ModelPersistenceError(f"Model file not found: {path}")
    try:
        model = joblib.load(path)
    except Exception as e:
        raise ModelPersistenceError(f"Failed to load model: {e}") from e
    if not isinstance(model, expected_type):
        raise ModelPersistenceError(
            f"Invalid model type: expected {expected_type.__name__}, got {type(model).__name__}"
        )
    return model
