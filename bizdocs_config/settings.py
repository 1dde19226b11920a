"""
Ledger settings (``bizdocs_config.settings``).

Typed, validated view of ``settings.yaml``.  Engines never read this module;
callers translate settings into engine options with ``render_options()`` and
``paid_source``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from bizdocs_engines.receivables import PaidSource
from bizdocs_engines.rendering import DEFAULT_FOOTER_LINES, RenderOptions
from bizdocs_kernel.domain.templates import DEFAULT_PRIMARY_COLOR

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass(frozen=True)
class LedgerSettings:
    """
    Settings for rendering and balance derivation.

    Guarantees:
        - ``footer_lines`` is a tuple of strings.
        - ``payment_link_base_url`` is an http(s) URL.
        - ``default_primary_color`` is a ``#RRGGBB`` hex color.
    """

    footer_lines: tuple[str, ...] = DEFAULT_FOOTER_LINES
    payment_link_base_url: str = "https://dreambig.app/pay"
    paid_source: PaidSource = PaidSource.DOCUMENT_STATUS
    default_primary_color: str = DEFAULT_PRIMARY_COLOR

    def __post_init__(self) -> None:
        if isinstance(self.footer_lines, str) or not all(
            isinstance(line, str) for line in self.footer_lines
        ):
            raise ValueError("footer_lines must be a list of strings")
        object.__setattr__(self, "footer_lines", tuple(self.footer_lines))

        if not self.payment_link_base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"payment_link_base_url must be an http(s) URL, got {self.payment_link_base_url!r}"
            )
        if not _HEX_COLOR_RE.match(self.default_primary_color):
            raise ValueError(
                f"default_primary_color must be #RRGGBB, got {self.default_primary_color!r}"
            )
        object.__setattr__(self, "paid_source", PaidSource(self.paid_source))

    def render_options(self) -> RenderOptions:
        return RenderOptions(
            footer_lines=self.footer_lines,
            payment_link_base_url=self.payment_link_base_url,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "footer_lines": list(self.footer_lines),
            "payment_link_base_url": self.payment_link_base_url,
            "paid_source": self.paid_source.value,
            "default_primary_color": self.default_primary_color,
        }


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """Build ``LedgerSettings`` from the parsed YAML mapping; absent keys keep defaults."""
    rendering = data.get("rendering") or {}
    receivables = data.get("receivables") or {}
    kwargs: dict[str, Any] = {}
    if "footer_lines" in rendering:
        kwargs["footer_lines"] = rendering["footer_lines"] or ()
    if rendering.get("payment_link_base_url"):
        kwargs["payment_link_base_url"] = rendering["payment_link_base_url"]
    if rendering.get("default_primary_color"):
        kwargs["default_primary_color"] = rendering["default_primary_color"]
    if receivables.get("paid_source"):
        kwargs["paid_source"] = receivables["paid_source"]
    return LedgerSettings(**kwargs)
