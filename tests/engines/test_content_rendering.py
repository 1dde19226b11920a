"""
Tests for ContentRenderer.

Covers:
- Canonical text layout (golden output)
- Header styles
- Conditional sections: tax, payment terms, pay online, notes
- Structured notes shown as labelled template fields
- HTML escaping, accent color and consistency with the text figures
- Determinism and trace logging
"""

from datetime import date
from decimal import Decimal

import pytest

from bizdocs_engines.rendering import (
    ContentRenderer,
    RenderOptions,
    format_date,
    format_quantity,
)
from bizdocs_kernel.domain.documents import BusinessProfile, LineItem
from bizdocs_kernel.domain.notes import FreeTextNotes, StructuredNotes
from bizdocs_kernel.domain.templates import (
    DocumentTemplate,
    HeaderStyle,
    TemplateField,
    TemplateStyling,
    default_template,
)

RULE = "-" * 60


def _template(header_style="solid", **styling):
    return DocumentTemplate(
        id="custom",
        name="Custom",
        document_type="invoice",
        business_types=("retail",),
        fields=(TemplateField("sku", "SKU/Product Code"),),
        styling=TemplateStyling(primary_color="#10B981", header_style=header_style, **styling),
    )


@pytest.fixture
def invoice(make_document):
    return make_document(
        id="doc-42",
        document_number="INV-0001",
        items=[
            LineItem("Widget", Decimal("2"), Decimal("10.00")),
            LineItem("Service call", Decimal("1.5"), Decimal("40.00")),
        ],
        tax=Decimal("12.00"),
        due_date=date(2024, 2, 14),
        counterparty_email="jane@example.com",
        notes=FreeTextNotes("Thanks"),
    )


class TestTextGolden:
    """Full text rendition for a known document."""

    def test_solid_header_invoice(self, invoice, business):
        text = ContentRenderer().render_text(invoice, business, _template("solid"))

        expected = "\n".join([
            "═" * 60,
            "ACME HARDWARE",
            "═" * 60,
            "",
            "INVOICE",
            "Number: INV-0001",
            "Date: 15 January 2024",
            "",
            "FROM:",
            "Acme Hardware",
            "Phone: +263 77 123 4567",
            "Location: Harare",
            "Email: sales@acme.example",
            "",
            "TO:",
            "Jane Customer",
            "Email: jane@example.com",
            "",
            "ITEMS:",
            RULE,
            "1. Widget",
            "   Quantity: 2 x $10.00 = $20.00",
            "2. Service call",
            "   Quantity: 1.5 x $40.00 = $60.00",
            RULE,
            "",
            "SUBTOTAL: $80.00",
            "TAX: $12.00",
            "TOTAL: $92.00",
            "",
            "PAYMENT TERMS:",
            "Due Date: 14 February 2024",
            "",
            "NOTES:",
            "Thanks",
            "",
            "",
            "─" * 60,
            "Generated by DreamBig Business OS",
            "Thank you for your business!",
        ]) + "\n"

        assert text == expected


class TestHeaderStyles:
    """Header banner per header_style."""

    def test_gradient_box(self, invoice, business):
        lines = ContentRenderer().render_text(invoice, business, _template("gradient")).split("\n")
        assert lines[0] == "╔" + "═" * 58 + "╗"
        assert lines[1].startswith("║") and lines[1].endswith("║")
        assert "ACME HARDWARE" in lines[1]
        assert len(lines[1]) == 60
        assert lines[2] == "╚" + "═" * 58 + "╝"

    def test_minimal(self, invoice, business):
        lines = ContentRenderer().render_text(invoice, business, _template("minimal")).split("\n")
        assert lines[0] == "Acme Hardware"
        assert lines[1] == RULE
        assert lines[3] == "INVOICE"


class TestConditionalSections:
    """Sections that appear only when their data and flags allow."""

    def test_no_tax_line_without_tax(self, make_document, business):
        text = ContentRenderer().render_text(make_document(), business, _template())
        assert "TAX:" not in text
        assert "SUBTOTAL: $100.00" in text
        assert "TOTAL: $100.00" in text

    def test_no_tax_line_for_zero_tax(self, make_document, business):
        text = ContentRenderer().render_text(make_document(tax="0"), business, _template())
        assert "TAX:" not in text

    def test_payment_terms_need_due_date(self, make_document, business):
        text = ContentRenderer().render_text(make_document(), business, _template())
        assert "PAYMENT TERMS:" not in text

    def test_payment_terms_disabled_by_template(self, invoice, business):
        template = _template(show_payment_terms=False)
        text = ContentRenderer().render_text(invoice, business, template)
        assert "PAYMENT TERMS:" not in text
        assert "Due Date:" not in text

    def test_pay_online_link(self, invoice, business):
        text = ContentRenderer().render_text(invoice, business, _template(show_qr_code=True))
        assert "PAY ONLINE:\nhttps://dreambig.app/pay/doc-42\n" in text

    def test_pay_online_custom_base(self, invoice, business):
        renderer = ContentRenderer(RenderOptions(payment_link_base_url="https://pay.example/"))
        text = renderer.render_text(invoice, business, _template(show_qr_code=True))
        assert "https://pay.example/doc-42" in text

    def test_missing_contact_lines_omitted(self, make_document):
        business = BusinessProfile(name="Solo")
        text = ContentRenderer().render_text(make_document(), business, _template())
        assert "FROM:\nSolo\n\nTO:\nJane Customer\n\nITEMS:" in text
        assert "Phone:" not in text

    def test_supplier_label_for_purchase_order(self, make_document, business):
        doc = make_document(type="purchase_order", counterparty_name="Bulk Supplies")
        text = ContentRenderer().render_text(doc, business, default_template("purchase_order"))
        assert "PURCHASE ORDER\n" in text
        assert "SUPPLIER:\nBulk Supplies" in text
        assert "\nTO:\n" not in text

    def test_no_notes_section_without_notes(self, make_document, business):
        text = ContentRenderer().render_text(make_document(), business, _template())
        assert "NOTES:" not in text
        assert "ADDITIONAL INFORMATION:" not in text

    def test_custom_footer(self, make_document, business):
        renderer = ContentRenderer(RenderOptions(footer_lines=("Powered by Ledger",)))
        text = renderer.render_text(make_document(), business, _template())
        assert text.endswith("─" * 60 + "\nPowered by Ledger\n")

    def test_empty_document(self, make_document, business):
        doc = make_document(items=[])
        text = ContentRenderer().render_text(doc, business, _template())
        assert f"ITEMS:\n{RULE}\n{RULE}\n" in text
        assert "TOTAL: $0.00" in text

    def test_zwl_amounts(self, make_document, business):
        doc = make_document(currency="ZWL", items=[LineItem("Bag", 1, "1234.5")])
        text = ContentRenderer().render_text(doc, business, _template())
        assert "TOTAL: ZWL1,234.50" in text


class TestStructuredNotes:
    """Template-field notes render as labelled values, never as raw JSON."""

    RAW = '{"fields": {"sku": "A-1", "warranty": "1 year", "bogus": "x", "barcode": ""}}'

    def test_labelled_fields_in_declaration_order(self, make_document, business, bundled_catalog):
        doc = make_document(notes=self.RAW)
        template = bundled_catalog.get("invoice-retail")
        text = ContentRenderer().render_text(doc, business, template)

        assert "ADDITIONAL INFORMATION:\nSKU/Product Code: A-1\nWarranty Period: 1 year\n" in text
        assert "NOTES:" not in text
        assert "bogus" not in text
        assert "Barcode" not in text

    def test_raw_serialization_never_rendered(self, make_document, business, bundled_catalog):
        doc = make_document(notes=self.RAW)
        rendered = ContentRenderer().render(doc, business, bundled_catalog.get("invoice-retail"))
        assert '{"fields"' not in rendered.text
        assert '{"fields"' not in rendered.html
        assert "SKU/Product Code" in rendered.html

    def test_no_matching_fields_omits_section(self, make_document, business):
        doc = make_document(notes=StructuredNotes({"colour": "red"}))
        text = ContentRenderer().render_text(doc, business, default_template("invoice"))
        assert "ADDITIONAL INFORMATION:" not in text
        assert "NOTES:" not in text
        assert "red" not in text


class TestHtml:
    """HTML rendition."""

    def test_self_contained_document(self, invoice, business):
        html = ContentRenderer().render_html(invoice, business, _template())
        assert html.startswith("<!DOCTYPE html>")
        assert "<style>" in html
        assert "#10B981" in html
        assert '<table class="items-table">' in html
        assert "header-solid" in html

    def test_same_figures_as_text(self, invoice, business):
        rendered = ContentRenderer().render(invoice, business, _template())
        for figure in ("$20.00", "$60.00", "$80.00", "$12.00", "$92.00", "14 February 2024"):
            assert figure in rendered.text
            assert figure in rendered.html

    def test_user_content_escaped(self, make_document):
        business = BusinessProfile(name="<Ben & Jerry's>")
        doc = make_document(
            counterparty_name='<script>alert("x")</script>',
            items=[LineItem("5\" pipe & fittings", 1, 3)],
            notes=FreeTextNotes("line one\n<b>line two</b>"),
        )
        html = ContentRenderer().render_html(doc, business, _template())
        assert "<script>" not in html
        assert "&lt;Ben &amp; Jerry&#x27;s&gt;" in html
        assert "5&quot; pipe &amp; fittings" in html
        assert "line one<br>&lt;b&gt;line two&lt;/b&gt;" in html

    def test_unsafe_color_replaced(self, invoice, business):
        template = _template()
        template = DocumentTemplate(
            id=template.id, name=template.name, document_type=template.document_type,
            business_types=template.business_types,
            styling=TemplateStyling(primary_color="red;}</style><script>"),
        )
        html = ContentRenderer().render_html(invoice, business, template)
        assert "<script>" not in html
        assert "#0066CC" in html

    def test_payment_link_and_payload(self, invoice, business):
        html = ContentRenderer().render_html(invoice, business, _template(show_qr_code=True))
        assert 'href="https://dreambig.app/pay/doc-42"' in html
        assert "data-payment=" in html
        assert "&quot;documentId&quot;:&quot;doc-42&quot;" in html

    def test_layout_class(self, invoice, business, bundled_catalog):
        html = ContentRenderer().render_html(invoice, business, bundled_catalog.get("invoice-retail"))
        assert '<body class="layout-detailed">' in html
        assert "header-gradient" in html

    @pytest.mark.parametrize("style", list(HeaderStyle))
    def test_every_header_style_renders(self, invoice, business, style):
        html = ContentRenderer().render_html(invoice, business, _template(style.value))
        assert f"header-{style.value}" in html


class TestDeterminismAndTracing:
    """Rendering is pure and traced."""

    def test_identical_inputs_identical_output(self, invoice, business, bundled_catalog):
        renderer = ContentRenderer()
        template = bundled_catalog.get("invoice-retail")
        assert renderer.render(invoice, business, template) == renderer.render(
            invoice, business, template,
        )

    def test_render_matches_individual_targets(self, invoice, business):
        renderer = ContentRenderer()
        template = _template()
        rendered = renderer.render(invoice, business, template)
        assert rendered.text == renderer.render_text(invoice, business, template)
        assert rendered.html == renderer.render_html(invoice, business, template)

    def test_engine_trace_emitted(self, invoice, business, captured_logs):
        ContentRenderer().render(invoice, business, _template())
        traces = [r for r in captured_logs() if r["message"] == "BIZDOCS_ENGINE_TRACE"]
        assert traces
        assert traces[-1]["engine_name"] == "renderer"


class TestFormatting:
    """Date and quantity helpers."""

    def test_format_date(self):
        assert format_date(date(2024, 1, 15)) == "15 January 2024"
        assert format_date(date(2023, 12, 1)) == "1 December 2023"

    @pytest.mark.parametrize("value,expected", [
        (Decimal("2"), "2"),
        (Decimal("2.00"), "2"),
        (Decimal("1.50"), "1.5"),
        (Decimal("0"), "0"),
        (Decimal("1000"), "1000"),
        (Decimal("0.125"), "0.125"),
    ])
    def test_format_quantity(self, value, expected):
        assert format_quantity(value) == expected
