"""
Builder Generator Configuration Reader

Reads optional settings from ``.buildergen.yaml`` in the project root (or a
path given on the command line). Every setting has a default, so the file is
optional:

    wrappers:
      optional: ["Optional"]        # heads classified as OPTIONAL_WRAPPED
      collection: ["list", "List"]  # heads accepted by builder(each=...)
    builder:
      suffix: "Builder"             # Command → CommandBuilder
      factory: "builder"            # Command.builder()
    output:
      suffix: "_builders"           # records.py → records_builders.py

Wrapper names are compared as written in the annotation. Adding
"typing.Optional" here is the way to get qualified spellings recognised.
"""

from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .models import GeneratorConfig

CONFIG_FILENAME = ".buildergen.yaml"

DEFAULT_CONFIG_YAML = """
wrappers:
  optional: ["Optional"]
  collection: ["list", "List"]
builder:
  suffix: "Builder"
  factory: "builder"
output:
  suffix: "_builders"
"""


def _names(section: dict[str, Any], key: str, default: list[str]) -> frozenset[str]:
    value = section.get(key, default)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"wrappers.{key} must be a list of type names, got {value!r}")
    return frozenset(value)


def _identifier(section: dict[str, Any], key: str, default: str, where: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str) or not value.isidentifier():
        raise ConfigError(f"{where}.{key} must be a Python identifier, got {value!r}")
    return value


def _section(doc: dict[str, Any], name: str) -> dict[str, Any]:
    section = doc.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def parse_config(doc: dict[str, Any], config_path: str | None = None) -> GeneratorConfig:
    """Build a GeneratorConfig from a parsed YAML document, applying defaults."""
    defaults = yaml.safe_load(DEFAULT_CONFIG_YAML)

    wrappers = _section(doc, "wrappers")
    builder = _section(doc, "builder")
    output = _section(doc, "output")

    output_suffix = output.get("suffix", defaults["output"]["suffix"])
    if not isinstance(output_suffix, str) or not output_suffix:
        raise ConfigError(f"output.suffix must be a non-empty string, got {output_suffix!r}")

    return GeneratorConfig(
        optional_wrappers=_names(wrappers, "optional", defaults["wrappers"]["optional"]),
        collection_wrappers=_names(wrappers, "collection", defaults["wrappers"]["collection"]),
        builder_suffix=_identifier(builder, "suffix", defaults["builder"]["suffix"], "builder"),
        factory_name=_identifier(builder, "factory", defaults["builder"]["factory"], "builder"),
        output_suffix=output_suffix,
        config_path=config_path,
    )


def load_generator_config(
    project_root: str | Path,
    config_path: str | Path | None = None,
) -> GeneratorConfig:
    """
    Load GeneratorConfig from .buildergen.yaml.

    Args:
        project_root: Directory searched for .buildergen.yaml.
        config_path: Explicit config file; must exist when given.

    Returns:
        GeneratorConfig with all settings resolved (defaults applied where missing).
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file does not exist: {path}")
    else:
        path = Path(project_root) / CONFIG_FILENAME
        if not path.exists():
            return parse_config({})

    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(doc, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    return parse_config(doc, str(path))
