import os
from dotenv import load_dotenv
from pathlib import Path

from orchestrator.fallback_manager import FallbackPolicy
from orchestrator.model_pool import DEFAULT_POOL_PATH, ModelPool
from api.openrouter_client import OPENROUTER_BASE_URL
from utils.logger import get_logger

logger = get_logger(__name__)


def _float_env(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={value!r}")
        return None


class Config:
    """Configuration management for the application."""

    def __init__(self, load_env_file: bool = True):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / '.env'
        if load_env_file and env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # API Configuration
        self.OPENROUTER_API_KEY = os.getenv('OPENROUTER_API_KEY') or None
        self.OPENROUTER_BASE_URL = os.getenv('OPENROUTER_BASE_URL', OPENROUTER_BASE_URL)
        self.OPENROUTER_REFERER = os.getenv('OPENROUTER_REFERER', 'https://haditha.com')
        self.OPENROUTER_TITLE = os.getenv('OPENROUTER_TITLE', 'Haditha')

        # Model Pool Configuration
        self.MODEL_POOL_PATH = os.getenv('MODEL_POOL_PATH') or str(DEFAULT_POOL_PATH)
        self.MODEL_POOL = os.getenv('MODEL_POOL', '')

        # Routing overrides (fall back to routing_defaults in the pool file)
        self.ATTEMPT_TIMEOUT_S = _float_env('ATTEMPT_TIMEOUT_S')
        self.CHAIN_TIMEOUT_S = _float_env('CHAIN_TIMEOUT_S')
        max_attempts = _float_env('MAX_ATTEMPTS_PER_CANDIDATE')
        self.MAX_ATTEMPTS_PER_CANDIDATE = int(max_attempts) if max_attempts is not None else None

    def validate(self) -> bool:
        """
        Validate that all required configuration is present.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if not self.OPENROUTER_API_KEY:
            logger.error("OPENROUTER_API_KEY is not set. Please set it in the .env file.")
            return False
        return True

    def load_model_pool(self) -> ModelPool:
        """Load the pool file, replacing its candidates when MODEL_POOL is set."""
        pool = ModelPool.from_yaml(self.MODEL_POOL_PATH)
        if self.MODEL_POOL.strip():
            pool = pool.with_candidates(self.MODEL_POOL.split(','))
        return pool

    def fallback_policy(self, pool: ModelPool) -> FallbackPolicy:
        defaults = pool.routing_defaults()
        policy = FallbackPolicy.from_defaults(defaults)
        overrides = {}
        if self.ATTEMPT_TIMEOUT_S is not None:
            overrides['attempt_timeout_s'] = self.ATTEMPT_TIMEOUT_S
        if self.CHAIN_TIMEOUT_S is not None:
            overrides['chain_timeout_s'] = self.CHAIN_TIMEOUT_S
        if self.MAX_ATTEMPTS_PER_CANDIDATE is not None:
            overrides['max_attempts_per_candidate'] = self.MAX_ATTEMPTS_PER_CANDIDATE
        if overrides:
            policy = FallbackPolicy(**{**policy.__dict__, **overrides})
        return policy

    def get_model_info(self) -> str:
        """
        Get information about the configured model pool.

        Returns:
            str: Formatted string with model information
        """
        pool = self.load_model_pool()
        head = pool.candidates()[0] if len(pool) else "none"
        return f"OpenRouter ({len(pool)} candidates, first: {head})"
