"""Centralized configuration management for the instance matcher."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .schema import MatchingOptions, WeightFactors


class AwsSettings(BaseModel):
    """Settings for the live AWS catalog and pricing providers."""
    region: str = Field(
        "us-east-1",
        description="Region used for EC2 instance types and spot prices"
    )
    pricing_region: str = Field(
        "us-east-1",
        description="Pricing API endpoint region (only us-east-1 and ap-south-1 serve it)"
    )
    endpoint_url: Optional[str] = Field(
        None,
        description="Endpoint override, e.g. http://localhost:4566 for LocalStack"
    )
    operating_system: str = Field(
        "Linux",
        description="Operating system filter for price-list lookups"
    )
    current_generation_only: bool = Field(
        True,
        description="Only list current-generation instance types"
    )


class MatcherConfig(BaseModel):
    """Complete configuration for the instance matcher."""
    weight_factors: WeightFactors = Field(default_factory=WeightFactors)
    max_results: int = Field(
        10,
        ge=1,
        description="Maximum number of matches to return"
    )
    include_spot_pricing: bool = Field(
        True,
        description="Look up current spot prices for each candidate"
    )
    aws: AwsSettings = Field(default_factory=AwsSettings)

    def matching_options(self) -> MatchingOptions:
        """Default matching options derived from this configuration."""
        return MatchingOptions(
            max_results=self.max_results,
            include_spot_pricing=self.include_spot_pricing,
            weight_factors=self.weight_factors,
        )


# Global config instance
_config: Optional[MatcherConfig] = None


def get_config() -> MatcherConfig:
    """Get the current configuration.

    Returns the global config, initializing with defaults if not yet loaded.
    """
    global _config
    if _config is None:
        _config = MatcherConfig()
    return _config


def load_config(path: Path) -> MatcherConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded MatcherConfig.
    """
    global _config

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    _config = MatcherConfig.model_validate(data or {})
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = MatcherConfig()


def find_config_file() -> Optional[Path]:
    """Find a matcher configuration file.

    Looks in (order of priority):
    1. INSTANCE_MATCHER_CONFIG environment variable
    2. ./matcher-config.yaml
    3. ./matcher-config.yml
    4. ~/.config/instance-matcher/config.yaml
    """
    env_path = os.environ.get("INSTANCE_MATCHER_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    for name in ["matcher-config.yaml", "matcher-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    user_config = Path.home() / ".config" / "instance-matcher" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def save_default_config(path: Path) -> None:
    """Save the default configuration to a YAML file.

    Args:
        path: Path where to save the configuration.
    """
    config = MatcherConfig()
    data = config.model_dump()

    yaml_content = """# Instance Matcher Configuration
# ==============================
#
# weight_factors blend the performance, cost and efficiency scores.
# They are applied as given and do not need to sum to 1.
#
# Copy this file to one of these locations:
#   - ./matcher-config.yaml (current directory)
#   - ~/.config/instance-matcher/config.yaml (user config)
#
# Or set the INSTANCE_MATCHER_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
