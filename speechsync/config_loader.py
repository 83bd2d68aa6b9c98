"""Handles loading configuration from YAML files and credentials from the environment."""

import yaml
import os
import logging
from typing import Any, Mapping, Optional

from .exceptions import ConfigurationError
from .models import SpeechCredentials, TranslationCredentials

logger = logging.getLogger(__name__)

SPEECH_ENV = {"key": "AZURE_SPEECH_KEY", "region": "AZURE_SPEECH_REGION"}
TRANSLATION_ENV = {
    "endpoint": "AZURE_OPENAI_ENDPOINT",
    "api_key": "AZURE_OPENAI_API_KEY",
    "deployment": "AZURE_OPENAI_DEPLOYMENT",
    "api_version": "AZURE_OPENAI_API_VERSION",
}

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except OSError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if config is None:
            logger.warning(f"Configuration file {config_path} is empty; using defaults.")
            return {}
        if not isinstance(config, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

def get_section(config: Mapping[str, Any], name: str) -> dict:
    """Returns a nested mapping from the config, or an empty dict when absent."""
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping.")
    return section

def _resolve(section: Mapping[str, Any], env: Mapping[str, str], field: str, env_name: str) -> Optional[str]:
    value = env.get(env_name) or section.get(field)
    return str(value) if value else None

def load_speech_credentials(config: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> SpeechCredentials:
    """
    Resolves Azure Speech credentials. Environment variables win over the
    `azure_speech` config section.

    Raises:
        ConfigurationError: If the key or region is missing.
    """
    env = os.environ if environ is None else environ
    section = get_section(config, "azure_speech")
    values = {field: _resolve(section, env, field, env_name) for field, env_name in SPEECH_ENV.items()}
    missing = [SPEECH_ENV[field] for field, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Azure Speech Services not configured. Please set {' and '.join(missing)} "
            f"(or the azure_speech section of the config file)."
        )
    return SpeechCredentials(**values)

def load_translation_credentials(config: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> TranslationCredentials:
    """
    Resolves Azure OpenAI credentials used for translation. Environment
    variables win over the `azure_openai` config section.

    Raises:
        ConfigurationError: If the endpoint, key or deployment is missing.
    """
    env = os.environ if environ is None else environ
    section = get_section(config, "azure_openai")
    values = {field: _resolve(section, env, field, env_name) for field, env_name in TRANSLATION_ENV.items()}
    missing = [TRANSLATION_ENV[field] for field, value in values.items() if not value and field != "api_version"]
    if missing:
        raise ConfigurationError(
            f"Azure OpenAI translation not configured. Please set {', '.join(missing)} "
            f"(or the azure_openai section of the config file)."
        )
    if not values["api_version"]:
        del values["api_version"]
    return TranslationCredentials(**values)

def credentials_status(config: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> dict:
    """Reports which remote capabilities have credentials, without raising."""
    status = {}
    for name, loader in (("speech", load_speech_credentials), ("translation", load_translation_credentials)):
        try:
            loader(config, environ)
            status[name] = True
        except ConfigurationError:
            status[name] = False
    return status
