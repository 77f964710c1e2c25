import json
import pytest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from modules.config_manager.config_manager import ConfigurationManager
from utils.exceptions import ConfigurationError
from utils import constants

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SHIPPED_SCHEMA = PROJECT_ROOT / "config" / "schema.json"
SHIPPED_CONFIG = PROJECT_ROOT / "config" / "config.json"


@pytest.fixture
def valid_config(tmp_path):
    return {
        "data": {"file_path": "data/data.csv"},
        "splitting": {"test_size": 0.3, "seed": 111},
        "training": {"algorithm": "sdca_maximum_entropy", "params": {}},
        "outputs": {"base_results_dir": str(tmp_path / "results")},
    }


@pytest.fixture
def write_config(tmp_path):
    """Writes a config dict next to a copy of the shipped schema and returns a manager for it."""
    def _write(config, raw=None):
        config_path = tmp_path / "config.json"
        schema_path = tmp_path / "schema.json"
        config_path.write_text(raw if raw is not None else json.dumps(config))
        schema_path.write_text(SHIPPED_SCHEMA.read_text())
        return ConfigurationManager(str(config_path), str(schema_path))
    return _write


def test_shipped_config_is_valid():
    manager = ConfigurationManager(str(SHIPPED_CONFIG), str(SHIPPED_SCHEMA))
    config = manager.load_and_validate()

    assert config['splitting']['test_size'] == 0.3
    assert config['outputs']['model_file_name'] == constants.MODEL_FILE


def test_load_and_validate_success(write_config, valid_config):
    config = write_config(valid_config).load_and_validate()

    assert config['data']['file_path'] == "data/data.csv"
    assert config['_internal_seeds'] == {'split': 111, 'model': 2111}


def test_seed_defaults_when_missing(write_config, valid_config):
    del valid_config['splitting']['seed']
    config = write_config(valid_config).load_and_validate()

    assert config['splitting']['seed'] == constants.DEFAULT_SEED
    assert config['_internal_seeds']['split'] == constants.DEFAULT_SEED


def test_config_not_found(tmp_path):
    manager = ConfigurationManager(str(tmp_path / "config.json"), str(SHIPPED_SCHEMA))
    with pytest.raises(ConfigurationError, match="File not found: .*config.json"):
        manager.load_and_validate()


def test_invalid_json(write_config):
    with pytest.raises(ConfigurationError, match="Invalid JSON in .*config.json"):
        write_config(None, raw="this is not valid json").load_and_validate()


def test_schema_failure(write_config, valid_config):
    del valid_config['training']
    with pytest.raises(ConfigurationError, match="Schema validation failed"):
        write_config(valid_config).load_and_validate()


@pytest.mark.parametrize("section, key, value, message", [
    ("splitting", "test_size", 1.0, "test_size must be between 0 and 1"),
    ("splitting", "test_size", 0.0, "test_size must be between 0 and 1"),
    ("splitting", "seed", -1, "seed must be non-negative"),
    ("training", "algorithm", "deep_magic", "Unknown training algorithm"),
    ("data", "file_path", "", "file_path' must be specified"),
    ("features", "n_features", 0, "n_features must be >= 1"),
    ("features", "word_ngram_range", [2, 1], "1 <= min <= max"),
    ("features", "char_ngram_range", [3], r"must be \[min, max\]"),
    ("evaluation", "top_k", 0, "top_k must be >= 1"),
    ("outputs", "model_file_name", "nested/model.bin", "plain file name"),
    ("logging", "level", "LOUD", "logging.level must be one of"),
])
def test_logic_validation(write_config, valid_config, section, key, value, message):
    valid_config.setdefault(section, {})[key] = value
    with pytest.raises(ConfigurationError, match=message):
        write_config(valid_config).load_and_validate()


def test_generate_run_id(write_config, valid_config):
    manager = write_config(valid_config)
    with patch('modules.config_manager.config_manager.datetime') as mock_datetime:
        mock_datetime.now.return_value = datetime(2023, 10, 27, 10, 30, 0)
        run_id = manager.generate_run_id()

    assert run_id == "20231027_103000"
    assert manager.generate_run_id() == run_id


def test_save_artifacts(write_config, valid_config, tmp_path):
    manager = write_config(valid_config)
    manager.load_and_validate()
    manager.generate_run_id()

    manager.save_artifacts(str(tmp_path / "run"))

    config_dir = tmp_path / "run" / constants.CONFIG_DIR
    saved = json.loads((config_dir / constants.CONFIG_USED_FILE).read_text())
    assert saved['_internal_seeds']['model'] == 2111
    assert len((config_dir / constants.CONFIG_HASH_FILE).read_text()) == 64
    metadata = json.loads((config_dir / constants.RUN_METADATA_FILE).read_text())
    assert metadata['run_id'] == manager.run_id


def test_overrides_applied_before_validation(write_config, valid_config):
    del valid_config['data']['file_path']
    manager = write_config(valid_config)

    config = manager.load_and_validate(overrides={"data": {"file_path": "elements.csv"},
                                                  "training": {"algorithm": "naive_bayes"}})

    assert config['data']['file_path'] == "elements.csv"
    assert config['training'] == {"algorithm": "naive_bayes", "params": {}}


def test_invalid_override_rejected(write_config, valid_config):
    with pytest.raises(ConfigurationError, match="Unknown training algorithm"):
        write_config(valid_config).load_and_validate(overrides={"training": {"algorithm": "deep_magic"}})
