"""
=============================================================================
CONTENT HANDLERS
=============================================================================

Turn a ResolvedTarget into a response.

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ ContentDispatcher    │ picks a responder by extension               │
    │ StaticResponder      │ file bytes + Content-Type from the MIME table│
    │ DynamicResponder     │ runs php-cgi, relays the body of its output  │
    └──────────────────────┴──────────────────────────────────────────────┘

Responders raise HTTPError subclasses; they never build error pages
themselves.

=============================================================================
"""

from .dispatcher import ContentDispatcher
from .static import StaticResponder
from .dynamic import DynamicResponder, split_cgi_output

__all__ = [
    "ContentDispatcher",
    "StaticResponder",
    "DynamicResponder",
    "split_cgi_output",
]
