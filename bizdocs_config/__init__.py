"""
bizdocs_config -- public entrypoints for template catalog and settings.

Responsibility:
    Provides ``load_catalog()`` and ``load_settings()``, the ways to obtain
    configuration at runtime.  Both return immutable objects that callers
    inject into engines (``TemplateResolver(catalog)``,
    ``ContentRenderer(settings.render_options())``).  There is no
    module-level cache or singleton.

Architecture position:
    Configuration -- YAML-driven, above ``bizdocs_kernel`` and
    ``bizdocs_engines``.  Neither of those imports this package.

Invariants enforced:
    - Deterministic loading: the same YAML always produces the same catalog
      and the same checksum.
    - Ambiguous catalogs load, but every ambiguity is logged as a warning.

Failure modes:
    - ``FileNotFoundError`` -- the given file does not exist.
    - ``InvalidTemplateCatalogError`` -- malformed catalog YAML.
    - ``ValueError`` -- settings values fail validation.

Audit relevance:
    Every ``load_catalog()`` call emits a ``BIZDOCS_CONFIG_TRACE`` log entry
    containing the source, checksum and template count, tying rendered
    documents back to the exact catalog that styled them.
"""

from __future__ import annotations

from pathlib import Path

from bizdocs_config.loader import compute_checksum, load_catalog_file, load_yaml_file
from bizdocs_config.settings import LedgerSettings, parse_settings
from bizdocs_kernel.domain.templates import DEFAULT_PRIMARY_COLOR, TemplateCatalog
from bizdocs_kernel.logging_config import get_logger

_logger = get_logger("config")

_DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CATALOG_PATH = _DATA_DIR / "templates.yaml"
DEFAULT_SETTINGS_PATH = _DATA_DIR / "settings.yaml"


def load_catalog(
    path: Path | str | None = None,
    default_primary_color: str = DEFAULT_PRIMARY_COLOR,
) -> TemplateCatalog:
    """Load a template catalog, the bundled one when ``path`` is None.

    Args:
        path: YAML catalog file.  Defaults to ``bizdocs_config/data/templates.yaml``.
        default_primary_color: Accent for templates whose styling omits one.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        InvalidTemplateCatalogError: If the file is not a valid catalog.
    """
    source = Path(path) if path is not None else DEFAULT_CATALOG_PATH
    catalog, raw = load_catalog_file(source, default_primary_color)

    _logger.info(
        "BIZDOCS_CONFIG_TRACE",
        extra={
            "trace_type": "BIZDOCS_CONFIG_TRACE",
            "source": str(source),
            "checksum": compute_checksum(raw),
            "template_count": len(catalog),
        },
    )

    for (doc_type, business_type), template_ids in catalog.ambiguities().items():
        _logger.warning(
            "template_catalog_ambiguous",
            extra={
                "source": str(source),
                "document_type": doc_type.value,
                "business_type": business_type.value,
                "template_ids": list(template_ids),
            },
        )
    return catalog


def load_settings(path: Path | str | None = None) -> LedgerSettings:
    """Load ledger settings, the bundled ones when ``path`` is None.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If a setting fails validation.
    """
    source = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    data = load_yaml_file(source)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {source} must contain a mapping")
    settings = parse_settings(data)
    _logger.info("settings_loaded", extra={
        "source": str(source),
        "checksum": compute_checksum(settings.to_dict()),
        "paid_source": settings.paid_source.value,
    })
    return settings


__all__ = [
    "DEFAULT_CATALOG_PATH",
    "DEFAULT_SETTINGS_PATH",
    "LedgerSettings",
    "load_catalog",
    "load_settings",
]
