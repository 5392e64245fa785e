"""
Selector configuration and presets.

Load selector settings from YAML/JSON files for per-agent tuning
without modifying code.
"""
from __future__ import annotations

import os
import json
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any

import yaml

from .validation import validate_selector_config

logger = logging.getLogger(__name__)


@dataclass
class SelectorConfig:
    """
    Configuration for one agent's selector.

    Read by the selector at the start of every cycle; change it between
    cycles only.

    Attributes:
        actions: Action type names spawned by UtilitySelector.initialise()
        tick_manually: Host calls tick_utility_ai() itself instead of
            every tick_component()
        ignore_zero_score: A score of exactly 0 makes an action ineligible
        invert_scoring: Pick the lowest score instead of the highest
        invert_priority: On a tie, the last-enumerated action wins
        randomize_on_equality: On a tie, flip a coin instead of using priority
        equality_tolerance: Score difference treated as a tie
        minimum_dwell_seconds: Minimum time before switching actions again
        can_run_without_body: Whether cycles run while the agent has no body
        random_seed: Seed for the tie-break random source (None = unseeded)
    """
    actions: List[str] = field(default_factory=list)
    tick_manually: bool = False
    ignore_zero_score: bool = True
    invert_scoring: bool = False
    invert_priority: bool = False
    randomize_on_equality: bool = False
    equality_tolerance: float = 0.0
    minimum_dwell_seconds: float = 0.0
    can_run_without_body: bool = True
    random_seed: Optional[int] = None

    def __post_init__(self):
        """Clamp numeric options to their valid ranges."""
        self.equality_tolerance = max(0.0, float(self.equality_tolerance))
        self.minimum_dwell_seconds = max(0.0, float(self.minimum_dwell_seconds))
        self.actions = list(self.actions)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SelectorConfig":
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def save(self, path: str) -> None:
        """Save config to JSON file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> Optional["SelectorConfig"]:
        """
        Load config from a JSON or YAML file.

        Returns:
            The config, or None if the file is missing, unreadable or invalid
        """
        if not os.path.exists(path):
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()

            if path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(content) or {}
            else:
                data = json.loads(content)

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return None

        result = validate_selector_config(data)
        if not result.is_valid:
            for error in result.errors:
                logger.warning(f"Invalid config {path}: {error.field}: {error.message}")
            return None

        return cls.from_dict(data)


# Built-in presets
PRESETS: Dict[str, SelectorConfig] = {
    "default": SelectorConfig(),
    # Re-decides every cycle, switches immediately
    "responsive": SelectorConfig(
        equality_tolerance=0.01,
        minimum_dwell_seconds=0.0,
    ),
    # Commits to an action for a while before reconsidering
    "stable": SelectorConfig(
        equality_tolerance=0.05,
        minimum_dwell_seconds=1.0,
    ),
    # Scores are costs: lowest wins
    "lowest_cost": SelectorConfig(
        invert_scoring=True,
        ignore_zero_score=False,
        equality_tolerance=0.01,
    ),
    # Ties are broken at random for varied behavior
    "shuffled": SelectorConfig(
        randomize_on_equality=True,
        equality_tolerance=0.1,
        minimum_dwell_seconds=0.5,
    ),
}


def get_preset(name: str) -> Optional[SelectorConfig]:
    """Get a copy of a built-in preset by name."""
    preset = PRESETS.get(name.lower())
    if preset is None:
        return None
    return SelectorConfig.from_dict(preset.to_dict())


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())


class ConfigManager:
    """
    Manages selector configurations with preset + custom file support.

    Example:
        >>> manager = ConfigManager("./selector_configs")
        >>> config = manager.get("stable")  # Uses built-in preset
        >>> config = manager.get("guard")   # Loads ./selector_configs/guard.yaml
    """

    def __init__(self, config_dir: str = "./selector_configs"):
        """
        Initialize config manager.

        Args:
            config_dir: Directory for custom selector configs
        """
        self.config_dir = config_dir
        self._cache: Dict[str, SelectorConfig] = {}

    def get(self, name: str) -> Optional[SelectorConfig]:
        """
        Get config by name.

        Checks in order:
        1. Cache
        2. Custom file (config_dir/name.json, .yaml or .yml)
        3. Built-in presets

        Returns:
            SelectorConfig or None if not found
        """
        name_lower = name.lower()

        if name_lower in self._cache:
            return self._cache[name_lower]

        for ext in [".json", ".yaml", ".yml"]:
            path = os.path.join(self.config_dir, f"{name_lower}{ext}")
            config = SelectorConfig.load(path)
            if config:
                self._cache[name_lower] = config
                return config

        preset = get_preset(name_lower)
        if preset:
            self._cache[name_lower] = preset
            return preset

        return None

    def save(self, config: SelectorConfig, name: str) -> str:
        """
        Save a config to file.

        Returns:
            Path where config was saved
        """
        os.makedirs(self.config_dir, exist_ok=True)
        path = os.path.join(self.config_dir, f"{name.lower()}.json")
        config.save(path)
        self._cache[name.lower()] = config
        return path

    def list_available(self) -> List[str]:
        """List all available configs (presets + custom files)."""
        available = set(list_presets())

        if os.path.exists(self.config_dir):
            for f in os.listdir(self.config_dir):
                if f.endswith((".json", ".yaml", ".yml")):
                    available.add(os.path.splitext(f)[0])

        return sorted(available)
