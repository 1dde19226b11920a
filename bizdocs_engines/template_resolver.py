"""
Module: bizdocs_engines.template_resolver
Responsibility:
    Pick the template a document is rendered with, given the document type
    and the issuing business's type.

Architecture position:
    Engines -- pure lookup over an injected ``TemplateCatalog``.

Invariants enforced:
    - Totality: ``resolve`` returns a template for every document type and
      every business type, registered or not.  There is no not-found error.
    - A template listing the business type explicitly wins over a wildcard
      (``other``) template, whatever their catalog order.
    - Among templates of equal rank, the first in catalog order wins.

Failure modes:
    - ValueError only for a document type that is not a ``DocumentType``.
"""

from __future__ import annotations

from bizdocs_kernel.domain.documents import BusinessProfile, BusinessType, Document, DocumentType
from bizdocs_kernel.domain.templates import DocumentTemplate, TemplateCatalog, default_template
from bizdocs_kernel.logging_config import get_logger

logger = get_logger("engines.template_resolver")


class TemplateResolver:
    """Resolve (document type, business type) to a template with fallback."""

    def __init__(self, catalog: TemplateCatalog):
        self._catalog = catalog

    @property
    def catalog(self) -> TemplateCatalog:
        return self._catalog

    def resolve(
        self,
        document_type: DocumentType | str,
        business_type: BusinessType | str,
    ) -> DocumentTemplate:
        doc_type = DocumentType(document_type)
        candidates = self._catalog.for_document_type(doc_type)

        for template in candidates:
            if template.serves(business_type):
                self._log("specific", doc_type, business_type, template)
                return template

        for template in candidates:
            if template.is_wildcard:
                self._log("wildcard", doc_type, business_type, template)
                return template

        template = default_template(doc_type)
        self._log("default", doc_type, business_type, template)
        return template

    def resolve_for(self, document: Document, business: BusinessProfile) -> DocumentTemplate:
        return self.resolve(document.type, business.type)

    @staticmethod
    def _log(
        match: str,
        doc_type: DocumentType,
        business_type: BusinessType | str,
        template: DocumentTemplate,
    ) -> None:
        logger.debug("template_resolved", extra={
            "document_type": doc_type.value,
            "business_type": str(getattr(business_type, "value", business_type)),
            "template_id": template.id,
            "match": match,
        })
