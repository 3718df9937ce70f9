"""Use cases for invoices and the admin purchase listing."""

from .enrichment import (
    PurchaseLoadTimeoutError,
    build_repository_fetchers,
    enrich_purchases,
    load_purchases_for_admin,
)
from .generate_invoice import GeneratedInvoice, generate_invoice, load_invoice_data
from .templates import (
    create_invoice_template,
    delete_invoice_template,
    get_default_invoice_template,
    get_invoice_template,
    list_invoice_templates,
    update_invoice_template,
    upload_template_logo,
)

__all__ = [
    "PurchaseLoadTimeoutError",
    "build_repository_fetchers",
    "enrich_purchases",
    "load_purchases_for_admin",
    "GeneratedInvoice",
    "generate_invoice",
    "load_invoice_data",
    "create_invoice_template",
    "delete_invoice_template",
    "get_default_invoice_template",
    "get_invoice_template",
    "list_invoice_templates",
    "update_invoice_template",
    "upload_template_logo",
]
