"""
Configuration system for cbind.

Supports:
- TOML configuration files (``cbind.toml``)
- CLI argument overrides
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .errors import ConfigError
from .ir.c_types import ConstRule, ConstScope

CONFIG_FILENAME = "cbind.toml"


def parse_const_rule(name: str) -> ConstRule:
    """Parse a rule name such as ``"foreign_alias"``."""
    try:
        return ConstRule(name.lower().replace("-", "_"))
    except ValueError:
        choices = ", ".join(r.value for r in ConstRule)
        raise ConfigError(f"Unknown constant rule '{name}' (expected one of: {choices})") from None


@dataclass
class ParserConfig:
    """Options handed to the C parser."""

    std: str = "c99"
    include_dirs: list[Path] = field(default_factory=list)
    defines: dict[str, str] = field(default_factory=dict)
    clang_args: list[str] = field(default_factory=list)


@dataclass
class ConstantsConfig:
    """How constants are emitted."""

    enum: ConstRule = ConstRule.VALUE
    foreign_prefix: str = "C."

    @property
    def rules(self) -> dict[ConstScope, ConstRule]:
        return {ConstScope.ENUM: self.enum}


@dataclass
class TranslatorConfig:
    """Main configuration container."""

    project_root: Path = field(default_factory=Path.cwd)
    parser: ParserConfig = field(default_factory=ParserConfig)
    constants: ConstantsConfig = field(default_factory=ConstantsConfig)

    def __post_init__(self):
        """Ensure project_root is a Path."""
        if isinstance(self.project_root, str):
            self.project_root = Path(self.project_root)

    @classmethod
    def from_file(cls, path: Path) -> "TranslatorConfig":
        """Load configuration from a TOML file."""
        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid TOML in {path}: {e}") from e

        return cls._from_dict(data, path.parent)

    @classmethod
    def _from_dict(cls, data: dict, base_path: Path) -> "TranslatorConfig":
        """Create config from dictionary."""
        parser_data = data.get("parser", {})
        const_data = data.get("constants", {})

        parser = ParserConfig(
            std=parser_data.get("std", "c99"),
            include_dirs=[Path(p) for p in parser_data.get("include_dirs", [])],
            defines={str(k): str(v) for k, v in parser_data.get("defines", {}).items()},
            clang_args=list(parser_data.get("clang_args", [])),
        )

        constants = ConstantsConfig(
            enum=parse_const_rule(const_data.get("enum", "value")),
            foreign_prefix=const_data.get("foreign_prefix", "C."),
        )

        return cls(
            project_root=base_path,
            parser=parser,
            constants=constants,
        )

    @classmethod
    def find_config(cls, start_path: Optional[Path] = None) -> Optional[Path]:
        """Find cbind.toml in current or parent directories."""
        if start_path is None:
            start_path = Path.cwd()

        current = start_path.resolve()

        for _ in range(10):  # Max 10 levels up
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return config_path

            parent = current.parent
            if parent == current:
                break
            current = parent

        return None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "TranslatorConfig":
        """Load configuration, auto-discovering if path not provided."""
        if config_path is None:
            config_path = cls.find_config()

        if config_path is not None and config_path.exists():
            return cls.from_file(config_path)

        # Return default config with current directory as root
        return cls(project_root=Path.cwd())

    def resolve_path(self, path: Path) -> Path:
        """Resolve a relative path against project root."""
        if path.is_absolute():
            return path
        return self.project_root / path

    @property
    def include_dirs_abs(self) -> list[Path]:
        """Include directories resolved against the project root."""
        return [self.resolve_path(p) for p in self.parser.include_dirs]
