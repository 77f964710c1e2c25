import json
import os
import hashlib
import sys
import logging
import jsonschema
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from modules.model_factory import ModelFactory
from utils.exceptions import ConfigurationError
from utils import constants

class ConfigurationManager:
    """
    Manages system configuration loading, validation, and access.
    Acts as the single source of truth for the training pipeline.
    """

    VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}

    def __init__(self, config_path: str = "config/config.json",
                 schema_path: str = "config/schema.json"):
        """
        Initialize the ConfigurationManager.

        Args:
            config_path (str): Path to the user configuration JSON.
            schema_path (str): Path to the JSON schema definition.
        """
        self.config_path = config_path
        self.schema_path = schema_path
        self.config: Dict[str, Any] = {}
        self.schema: Dict[str, Any] = {}
        self.run_id: Optional[str] = None
        self.logger = logging.getLogger("config_manager")

    def load_and_validate(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Main entry point. Loads config, applies overrides, validates schema
        and logic, and propagates seeds.

        Args:
            overrides: Nested values (e.g. from the command line) merged over
                the file before validation, so they can supply required keys.

        Returns:
            Dict[str, Any]: The fully validated configuration.

        Raises:
            ConfigurationError: If any validation step fails.
        """
        # 1. Load Files
        self.config = self._load_json(self.config_path)
        self.schema = self._load_json(self.schema_path)
        if overrides:
            self._apply_overrides(self.config, overrides)

        # 2. Structural Validation (Schema)
        self._validate_schema()

        # 3. Logical Validation (Business Rules & Bounds)
        self._validate_logic()

        # 4. Internal Seed Propagation (Reproducibility)
        self._propagate_seeds()

        return self.config

    def generate_run_id(self) -> str:
        """
        Generate or retrieve a unique run identifier based on timestamp.
        Used for metadata.
        """
        if not self.run_id:
            timestamp = datetime.now()
            # Format: YYYYMMDD_HHMMSS
            self.run_id = timestamp.strftime("%Y%m%d_%H%M%S")
        return self.run_id

    def save_artifacts(self, output_dir: str) -> None:
        """
        Save configuration artifacts to the run directory for full reproducibility.

        Saves:
        1. config_used.json: The exact config object in memory.
        2. config_hash.txt: SHA256 hash for versioning.
        3. run_metadata.json: Environment details (Python version, Platform, etc.).
        """
        config_dir = Path(output_dir) / constants.CONFIG_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        with open(config_dir / constants.CONFIG_USED_FILE, 'w') as f:
            json.dump(self.config, f, indent=2)

        config_str = json.dumps(self.config, sort_keys=True)
        config_hash = hashlib.sha256(config_str.encode()).hexdigest()

        with open(config_dir / constants.CONFIG_HASH_FILE, 'w') as f:
            f.write(config_hash)

        metadata = {
            'run_id': self.run_id,
            'start_time': datetime.now().isoformat(),
            'python_version': sys.version,
            'platform': sys.platform,
            'config_hash': config_hash,
            'working_directory': os.getcwd()
        }

        with open(config_dir / constants.RUN_METADATA_FILE, 'w') as f:
            json.dump(metadata, f, indent=2)

    def _load_json(self, path: str) -> Dict[str, Any]:
        """Safely load a JSON file."""
        if not os.path.exists(path):
            raise ConfigurationError(f"File not found: {path}")
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {str(e)}")

    @classmethod
    def _apply_overrides(cls, target: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                cls._apply_overrides(target[key], value)
            else:
                target[key] = value

    def _validate_schema(self) -> None:
        """Validate config structure against JSON schema."""
        try:
            jsonschema.validate(instance=self.config, schema=self.schema)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Schema validation failed: {e.message}")

    def _validate_logic(self) -> None:
        """Comprehensive logical validation."""
        # --- Data Section ---
        data = self.config.get('data', {})
        if not data.get('file_path'):
            raise ConfigurationError("Data 'file_path' must be specified and non-empty.")

        # --- Splitting Section ---
        split = self.config.get('splitting', {})
        test_size = split.get('test_size', constants.DEFAULT_TEST_SIZE)
        if not (0.0 < test_size < 1.0):
            raise ConfigurationError(f"test_size must be between 0 and 1 (exclusive), got {test_size}")
        if split.get('seed', constants.DEFAULT_SEED) < 0:
            raise ConfigurationError("Splitting seed must be non-negative.")

        # --- Features Section ---
        features = self.config.get('features', {})
        if features.get('n_features', 1) < 1:
            raise ConfigurationError(f"features.n_features must be >= 1, got {features['n_features']}")
        for key in ('word_ngram_range', 'char_ngram_range'):
            if key in features:
                self._validate_ngram_range(key, features[key])

        # --- Training Section ---
        algorithm = self.config.get('training', {}).get('algorithm', constants.DEFAULT_ALGORITHM)
        if algorithm not in ModelFactory.get_available_models():
            raise ConfigurationError(
                f"Unknown training algorithm '{algorithm}'. Available: {ModelFactory.get_available_models()}"
            )

        # --- Evaluation Section ---
        top_k = self.config.get('evaluation', {}).get('top_k', constants.DEFAULT_TOP_K)
        if top_k < 1:
            raise ConfigurationError(f"evaluation.top_k must be >= 1, got {top_k}")

        # --- Outputs Section ---
        model_file_name = self.config.get('outputs', {}).get('model_file_name', constants.MODEL_FILE)
        if not model_file_name or Path(model_file_name).name != model_file_name:
            raise ConfigurationError(f"outputs.model_file_name must be a plain file name, got '{model_file_name}'")

        # --- Logging Section ---
        level = self.config.get('logging', {}).get('level', 'INFO')
        if level.upper() not in self.VALID_LOG_LEVELS:
            raise ConfigurationError(f"logging.level must be one of {sorted(self.VALID_LOG_LEVELS)}, got '{level}'")

    @staticmethod
    def _validate_ngram_range(key: str, value) -> None:
        if len(value) != 2:
            raise ConfigurationError(f"features.{key} must be [min, max], got {value}")
        low, high = value
        if low < 1 or high < low:
            raise ConfigurationError(f"features.{key} must satisfy 1 <= min <= max, got {value}")

    def _propagate_seeds(self) -> None:
        """
        Propagate master seed to internal components to ensure full pipeline reproducibility.
        Uses non-overlapping offsets to avoid correlation between components.
        """
        master_seed = self.config.setdefault('splitting', {}).setdefault('seed', constants.DEFAULT_SEED)

        self.config['_internal_seeds'] = {
            'split': master_seed,
            'model': master_seed + 2000,
        }
        self.logger.debug(f"Seeds propagated from master ({master_seed}): {self.config['_internal_seeds']}")
