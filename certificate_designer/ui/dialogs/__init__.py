# certificate_designer/ui/dialogs/__init__.py
"""
Standalone dialog classes.

Re-exports only; implementations live in sibling modules.
"""
from .preview import CertificatePreviewDialog

__all__ = [
    "CertificatePreviewDialog",
]
