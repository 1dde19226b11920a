"""
Configuration Loader (``bizdocs_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into kernel ``DocumentTemplate`` /
``TemplateCatalog`` instances.  Callers use ``bizdocs_config.load_catalog()``
and ``bizdocs_config.load_settings()``; the functions here are the parsing
steps behind them.

Architecture position
---------------------
**Config layer** -- infrastructure tooling above the kernel.  The kernel
never imports this package.

Invariants enforced
-------------------
* Every parse error in a catalog raises ``InvalidTemplateCatalogError``
  naming the source and the offending template; no silent defaults for
  required keys (``id``, ``name``, ``document_type``, ``business_types``).
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``InvalidTemplateCatalogError`` (wrapping ``yaml.YAMLError``).
* Missing required keys or unknown enum values -> ``InvalidTemplateCatalogError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from bizdocs_kernel.domain.templates import (
    DEFAULT_PRIMARY_COLOR,
    DocumentTemplate,
    TemplateCatalog,
    TemplateField,
    TemplateStyling,
)
from bizdocs_kernel.exceptions import InvalidTemplateCatalogError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _mapping(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _flag(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise TypeError(f"{key} must be true or false, got {value!r}")
    return value


def parse_field(data: dict[str, Any]) -> TemplateField:
    """Parse a ``TemplateField`` from a dict."""
    data = _mapping(data, "field")
    default = data.get("default_value")
    return TemplateField(
        id=data["id"],
        label=data["label"],
        type=data.get("type", "text"),
        required=_flag(data, "required", False),
        default_value=str(default) if default is not None else None,
        options=tuple(str(o) for o in data.get("options", ())),
    )


def parse_styling(
    data: dict[str, Any],
    default_primary_color: str = DEFAULT_PRIMARY_COLOR,
) -> TemplateStyling:
    """Parse ``TemplateStyling``; absent flags take the renderer defaults."""
    data = _mapping(data, "styling")
    return TemplateStyling(
        primary_color=data.get("primary_color", default_primary_color),
        header_style=data.get("header_style", "gradient"),
        show_logo=_flag(data, "show_logo", True),
        show_qr_code=_flag(data, "show_qr_code", False),
        show_payment_terms=_flag(data, "show_payment_terms", True),
        show_delivery_info=_flag(data, "show_delivery_info", False),
    )


def parse_template(
    data: dict[str, Any],
    default_primary_color: str = DEFAULT_PRIMARY_COLOR,
) -> DocumentTemplate:
    """
    Parse a ``DocumentTemplate`` from a dict.

    Raises:
        KeyError: if required keys are missing.
        ValueError: if an enum value is unknown.
        TypeError: if a section has the wrong shape or a flag is not a bool.
    """
    business_types = data["business_types"]
    if isinstance(business_types, str):
        business_types = [business_types]
    raw_fields = data.get("fields") or []
    if not isinstance(raw_fields, list):
        raise TypeError(f"fields must be a list, got {type(raw_fields).__name__}")
    return DocumentTemplate(
        id=data["id"],
        name=data["name"],
        document_type=data["document_type"],
        business_types=tuple(business_types),
        layout=data.get("layout", "modern"),
        fields=tuple(parse_field(f) for f in raw_fields),
        styling=parse_styling(data.get("styling") or {}, default_primary_color),
    )


def parse_catalog(
    data: dict[str, Any],
    source: str = "<memory>",
    default_primary_color: str = DEFAULT_PRIMARY_COLOR,
) -> TemplateCatalog:
    """
    Parse a whole catalog mapping (``{"templates": [...]}``).

    Raises:
        InvalidTemplateCatalogError: on any structural or value error.
    """
    raw_templates = data.get("templates")
    if not isinstance(raw_templates, list):
        raise InvalidTemplateCatalogError(source, "'templates' must be a list")

    templates = []
    for index, raw in enumerate(raw_templates):
        label = raw.get("id", f"#{index}") if isinstance(raw, dict) else f"#{index}"
        if not isinstance(raw, dict):
            raise InvalidTemplateCatalogError(source, f"template {label} is not a mapping")
        try:
            templates.append(parse_template(raw, default_primary_color))
        except KeyError as exc:
            raise InvalidTemplateCatalogError(
                source, f"template {label} is missing required key {exc.args[0]!r}"
            ) from exc
        except (TypeError, ValueError) as exc:
            raise InvalidTemplateCatalogError(source, f"template {label}: {exc}") from exc

    try:
        return TemplateCatalog(templates, source=source)
    except ValueError as exc:
        raise InvalidTemplateCatalogError(source, str(exc)) from exc


def load_catalog_file(
    path: Path,
    default_primary_color: str = DEFAULT_PRIMARY_COLOR,
) -> tuple[TemplateCatalog, dict[str, Any]]:
    """Load and parse a catalog file; returns the catalog and the raw mapping."""
    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as exc:
        raise InvalidTemplateCatalogError(str(path), f"malformed YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidTemplateCatalogError(str(path), "top level must be a mapping")
    return parse_catalog(data, str(path), default_primary_color), data


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Returns a hex-encoded SHA-256 hash string.
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
