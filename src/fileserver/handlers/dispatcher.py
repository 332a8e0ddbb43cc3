"""
Content dispatch: pick the responder for a resolved target.

    extension "php" (any case)  →  DynamicResponder
    anything else               →  StaticResponder
"""

import logging
from typing import Optional

from ..http.response import HTTPResponse
from ..http.target import ResolvedTarget
from .dynamic import DynamicResponder
from .static import StaticResponder


logger = logging.getLogger(__name__)

DYNAMIC_EXTENSION = "php"


class ContentDispatcher:
    """
    Routes a ResolvedTarget to the static or the dynamic responder.

    Usage:
        dispatcher = ContentDispatcher(interpreter="php-cgi")
        response = dispatcher.dispatch(resolved)
    """

    def __init__(
        self,
        interpreter: str = "php-cgi",
        static: Optional[StaticResponder] = None,
        dynamic: Optional[DynamicResponder] = None,
    ):
        self.static = static or StaticResponder()
        self.dynamic = dynamic or DynamicResponder(interpreter)

    @staticmethod
    def is_dynamic(extension: str) -> bool:
        return extension.lower() == DYNAMIC_EXTENSION

    def dispatch(self, resolved: ResolvedTarget) -> HTTPResponse:
        """
        Produce the response for `resolved`.

        Errors from the responders (HTTPError subclasses) propagate.
        """
        if self.is_dynamic(resolved.extension):
            logger.debug(f"Running {resolved.path} (query={resolved.query!r})")
            return self.dynamic.respond(resolved)

        logger.debug(f"Serving {resolved.path}")
        return self.static.respond(resolved)
