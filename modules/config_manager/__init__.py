"""
Configuration Manager Module
============================

Responsibility:
- Centralized loading and validation of JSON configuration files.
- Enforcement of schema constraints and logical business rules.
- Deterministic seed propagation for reproducibility.
- Persistence of the configuration used for a run.
"""

from .config_manager import ConfigurationManager

__all__ = ['ConfigurationManager']
