"""Configuration for Ezarg."""

import os
import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from dotenv import load_dotenv

from .models import ProviderId

load_dotenv()

# Environment variables holding the process-wide default key per provider
API_KEY_ENV_VARS = {
    ProviderId.CLAUDE: "CLAUDE_API_KEY",
    ProviderId.CHATGPT: "OPENAI_API_KEY",
    ProviderId.GROK: "GROK_API_KEY",
    ProviderId.PERPLEXITY: "PERPLEXITY_API_KEY",
}

# API endpoints
CLAUDE_API_URL = "https://api.anthropic.com/v1/messages"
OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
GROK_API_URL = "https://api.x.ai/v1/chat/completions"
PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"

# Model per provider, overridable from the environment
CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "claude-sonnet-4-5-20250929")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-5")
GROK_MODEL = os.getenv("GROK_MODEL", "grok-4")
PERPLEXITY_MODEL = os.getenv("PERPLEXITY_MODEL", "sonar")

# Claude pins its API version in a header and requires a token ceiling
ANTHROPIC_VERSION = "2023-06-01"
CLAUDE_MAX_TOKENS = int(os.getenv("CLAUDE_MAX_TOKENS", "4096"))

# Per-call timeout in seconds
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "120"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Persisted provider selection
CONFIG_FILE = os.getenv("EZARG_CONFIG_FILE", "data/ezarg_config.json")

# Providers queried when nothing has been saved
DEFAULT_PROVIDERS = [provider.value for provider in ProviderId]


def credentials_from_env() -> Dict[ProviderId, Optional[str]]:
    """Read the default key for every provider from the environment."""
    return {provider: os.getenv(var) for provider, var in API_KEY_ENV_VARS.items()}


def _ensure_config_dir(path: str):
    """Ensure the directory holding the config file exists."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def parse_providers(values: Sequence[str]) -> List[ProviderId]:
    """
    Validate provider identifiers, keeping their order and dropping repeats.

    Raises:
        ValueError: If an identifier is not a known provider
    """
    providers = []
    for value in values:
        try:
            provider = ProviderId(value)
        except ValueError:
            known = [p.value for p in ProviderId]
            raise ValueError(f"Unknown provider '{value}'. Available: {known}") from None
        if provider not in providers:
            providers.append(provider)
    return providers


def load_provider_config(path: Optional[str] = None) -> List[ProviderId]:
    """Load the configured providers from file, or return defaults."""
    path = path or CONFIG_FILE
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                config = json.load(f)
                providers = parse_providers(config.get('providers', DEFAULT_PROVIDERS))
                if providers:
                    return providers
        except (json.JSONDecodeError, IOError, ValueError, AttributeError):
            pass
    return parse_providers(DEFAULT_PROVIDERS)


def save_provider_config(providers: Sequence[str], path: Optional[str] = None) -> List[ProviderId]:
    """Validate and save the configured providers."""
    path = path or CONFIG_FILE
    parsed = parse_providers(providers)
    if not parsed:
        raise ValueError("At least one provider must be configured")
    _ensure_config_dir(path)
    with open(path, 'w') as f:
        json.dump({'providers': [p.value for p in parsed]}, f, indent=2)
    return parsed
