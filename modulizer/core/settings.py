"""Conversion settings.

Caller-supplied configuration shared by every document in one conversion
batch. Loaded from YAML (config/modulizer.yaml by default) or built in code.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import DEFAULT_CONSTRUCTOR_BRIDGE_MEMBER

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "modulizer.yaml"


class ConversionSettings(BaseModel):
    """Process-wide options for namespace-to-module conversion."""

    model_config = ConfigDict(extra="forbid")

    namespaces: Set[str] = Field(
        default_factory=set,
        description="Root namespace names whose member assignments become exports",
    )
    mutable_exports: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Namespace path -> member names exported with `let`",
    )
    exclude_references: Set[str] = Field(
        default_factory=set,
        description="Dotted paths replaced with `undefined`",
    )
    exclude_documents: Set[str] = Field(
        default_factory=set,
        description="HTML import URLs that are never followed",
    )
    constructor_bridge_member: str = Field(
        DEFAULT_CONSTRUCTOR_BRIDGE_MEMBER,
        description="Member exported under its namespace's own name",
        min_length=1,
    )

    @field_validator("mutable_exports")
    @classmethod
    def _strip_blank_members(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        return {ns: [m for m in members if m] for ns, members in value.items()}

    def is_mutable(self, namespace_name: str, member: str) -> bool:
        """Return True if `member` of `namespace_name` must stay reassignable."""
        return member in self.mutable_exports.get(namespace_name, ())


def load_settings(path: Optional[Union[str, Path]] = None) -> ConversionSettings:
    """Load settings from a YAML file.

    Args:
        path: Config file path. Defaults to config/modulizer.yaml.

    Returns:
        Validated ConversionSettings (defaults if the file does not exist)

    Raises:
        pydantic.ValidationError: If the file contains unknown or mistyped keys
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"{config_path} not found, using default conversion settings")
        return ConversionSettings()

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    settings = ConversionSettings(**config)
    logger.debug(f"Loaded conversion settings from {config_path}: {settings}")
    return settings
