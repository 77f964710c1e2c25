#!/usr/bin/env python
"""
Element Classification Pipeline - Main Entry Point
Trains, evaluates and saves a multiclass classifier for web UI element attributes.
"""
import os
import sys
import logging
import argparse
import traceback
import random
from pathlib import Path

import numpy as np

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from modules.config_manager import ConfigurationManager
from modules.logging_config import LoggingConfigurator
from modules.data_manager import DataManager
from modules.evaluation_engine import EvaluationEngine
from modules.model_factory import AlgorithmConfig, ModelFactory
from modules.training_engine import Trainer
from utils.exceptions import ElementClassifierException
from utils import constants


def parse_arguments(argv=None):
    """
    Parse command-line arguments for configurable pipeline execution.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Element Classification Pipeline - Train, Evaluate & Save",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config/config.json",
        help="Path to the configuration JSON file"
    )

    parser.add_argument(
        "--schema",
        type=str,
        default="config/schema.json",
        help="Path to the configuration JSON schema"
    )

    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="Training CSV file (overrides data.file_path in the config)"
    )

    parser.add_argument(
        "--algorithm",
        type=str,
        default=None,
        choices=ModelFactory.get_available_models(),
        help="Classifier to train (overrides training.algorithm in the config)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and setup without training"
    )

    return parser.parse_args(argv)


def build_overrides(args) -> dict:
    """Config values set on the command line, shaped like the config file."""
    overrides = {}
    if args.verbose:
        overrides['logging'] = {'level': 'DEBUG'}
    if args.data:
        overrides['data'] = {'file_path': args.data}
    if args.algorithm:
        overrides['training'] = {'algorithm': args.algorithm}
    return overrides


def setup_global_determinism(config: dict, logger: logging.Logger):
    """
    Seed the global random generators so runs are reproducible.

    Args:
        config: Configuration dictionary containing seed settings.
        logger: Logger instance for recording seed information.
    """
    seed = config.get('splitting', {}).get('seed', constants.DEFAULT_SEED)
    logger.info(f"Setting Global Deterministic Seed: {seed}")

    random.seed(seed)
    np.random.seed(seed)
    os.environ['PYTHONHASHSEED'] = str(seed)


def main(argv=None):
    """
    Main pipeline orchestration function.

    Returns:
        int: Exit code (0 for success, 1 for errors, 130 when interrupted)
    """
    logger = None

    try:
        args = parse_arguments(argv)

        print("\n" + "=" * 80)
        print("    ELEMENT CLASSIFICATION PIPELINE")
        print("=" * 80 + "\n")

        # ---------------------------------------------------------------
        # PHASE 0: INITIALIZATION & VALIDATION
        # ---------------------------------------------------------------
        config_manager = ConfigurationManager(config_path=args.config, schema_path=args.schema)
        config = config_manager.load_and_validate(overrides=build_overrides(args))

        logging_configurator = LoggingConfigurator(config)
        logging_configurator.setup()
        logger = logging_configurator.get_logger('pipeline')

        logger.info("Pipeline initialization started")
        logger.info(f"Configuration loaded from: {args.config}")

        run_id = config_manager.generate_run_id()
        run_dir = Path(config.get('outputs', {}).get('base_results_dir', 'results')).absolute()
        run_dir.mkdir(parents=True, exist_ok=True)
        config_manager.save_artifacts(str(run_dir))

        setup_global_determinism(config, logger)

        training_file = config['data']['file_path']
        algorithm = AlgorithmConfig.from_config(config)
        logger.info(f"Run ID: {run_id}")
        logger.info(f"Training file: {training_file}")
        logger.info(f"Algorithm: {algorithm.display_name}")
        logger.info(f"Output Directory: {run_dir}")

        if args.dry_run:
            DataManager.ensure_exists(training_file)
            logger.info("Dry run mode: validation complete. Exiting without training.")
            print("\n[SUCCESS] Configuration validated successfully.")
            return 0

        # ---------------------------------------------------------------
        # PHASE 1: TRAINING
        # ---------------------------------------------------------------
        logger.info("=" * 60)
        logger.info("PHASE 1: LOAD, SPLIT & TRAIN")
        logger.info("=" * 60)

        trainer = Trainer(config, logger, algorithm=algorithm)
        trainer.fit(training_file)

        # ---------------------------------------------------------------
        # PHASE 2: EVALUATION
        # ---------------------------------------------------------------
        logger.info("=" * 60)
        logger.info("PHASE 2: EVALUATION")
        logger.info("=" * 60)

        metrics = trainer.evaluate()
        EvaluationEngine(config, logger).execute(metrics, "test")

        # ---------------------------------------------------------------
        # PHASE 3: PERSISTENCE
        # ---------------------------------------------------------------
        logger.info("=" * 60)
        logger.info("PHASE 3: SAVE MODEL")
        logger.info("=" * 60)

        model_path = trainer.save()

        logger.info("-" * 60)
        logger.info("PIPELINE COMPLETED SUCCESSFULLY")
        logger.info(f"Model: {trainer.name}")
        logger.info(f"MicroAccuracy: {metrics.micro_accuracy:.4f}  MacroAccuracy: {metrics.macro_accuracy:.4f}")
        logger.info(f"LogLoss: {metrics.log_loss:.4f}  LogLossReduction: {metrics.log_loss_reduction:.4f}")
        logger.info(f"Model saved to: {model_path}")
        logger.info("-" * 60)

        print(f"\n[SUCCESS] Pipeline completed. Model saved to: {model_path}")

        return 0

    except ElementClassifierException as e:
        # Known pipeline errors
        msg = f"Pipeline Error: {str(e)}"
        print(f"\n[ERROR] {msg}")
        if logger:
            logger.critical(msg, exc_info=True)
        else:
            traceback.print_exc()
        return 1

    except KeyboardInterrupt:
        print("\n[INTERRUPTED] Pipeline interrupted by user.")
        if logger:
            logger.warning("Pipeline interrupted by user (Ctrl+C)")
        return 130

    except Exception as e:
        # Unexpected errors
        msg = f"Unexpected Error: {str(e)}"
        print(f"\n[CRITICAL] {msg}")
        if logger:
            logger.critical(msg, exc_info=True)
        else:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
