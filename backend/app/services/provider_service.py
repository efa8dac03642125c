"""
Provider Service
Builds the episode provider from config.yaml once per process
"""

import sys
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from config import load_config
from episode_provider import EpisodeProvider
from logger import setup_logging
from tvdb import create_tvdb_client_from_config


# Global provider instance
_provider_instance: Optional[EpisodeProvider] = None


def get_episode_provider() -> EpisodeProvider:
    """
    Get or create the episode provider singleton

    Returns:
        EpisodeProvider backed by a TVDB client

    Raises:
        FileNotFoundError: If config.yaml is missing
        ValueError: If required configuration is missing
    """
    global _provider_instance
    if _provider_instance is None:
        config = load_config()
        log_file = Path(config.logging.log_file) if config.logging and config.logging.log_file else None
        verbose = bool(config.logging and config.logging.verbose)
        logger = setup_logging(log_file, verbose=verbose)

        client = create_tvdb_client_from_config(config, logger)
        _provider_instance = EpisodeProvider(
            client,
            image_timeout=config.tvdb.timeout,
            logger=logger
        )
    return _provider_instance


def reset_episode_provider() -> None:
    """Drop the cached provider so the next call reloads config.yaml"""
    global _provider_instance
    if _provider_instance is not None:
        _provider_instance.catalog.close()
        _provider_instance.session.close()
    _provider_instance = None
