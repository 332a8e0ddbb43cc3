"""
=============================================================================
DYNAMIC (PHP) RESPONDER
=============================================================================

Runs a CGI interpreter on the requested script and relays its output.

=============================================================================
INVOCATION
=============================================================================

The interpreter is started as an argument vector, never through a shell;
the query string and script path only travel in the environment:

    argv:  shlex.split(config.interpreter)        e.g. ["php-cgi"]
    env:   <server environment>
           QUERY_STRING=x=1&y=2                   (raw, not decoded)
           REDIRECT_STATUS=200                    (php-cgi refuses to run
                                                   without it)
           SCRIPT_FILENAME=/var/www/run.php

Whatever the query contains, it cannot reach a command line.

=============================================================================
OUTPUT
=============================================================================

The interpreter writes a CGI response: its own header block, a blank
line, then the body. Only the body is relayed:

    X-Powered-By: PHP/8.2\r\n
    Content-type: text/html; charset=UTF-8\r\n
    \r\n                                   ◄── terminator at offset t
    <h1>hello</h1>                         ◄── body = output[t + 4:]

    Content-Length = len(output) - (t + 4)

The CGI headers (Content-type included) are dropped, so the reply has no
Content-Type header. Output without a terminator is a 500.

The exit status is logged but does not change the response: php-cgi
exits non-zero on script errors while still producing a page.

=============================================================================
"""

import os
import shlex
import logging
import subprocess
from typing import Dict

from ..http.errors import InterpreterError
from ..http.response import HTTPResponse, ok
from ..http.target import ResolvedTarget


logger = logging.getLogger(__name__)

CGI_TERMINATOR = b"\r\n\r\n"


def split_cgi_output(output: bytes) -> bytes:
    """
    Return the body of a CGI response (everything after the header block).

    Raises:
        InterpreterError: The output has no header terminator.
    """
    end = output.find(CGI_TERMINATOR)
    if end == -1:
        raise InterpreterError(
            f"Interpreter output has no header terminator ({len(output)} bytes)"
        )
    return output[end + len(CGI_TERMINATOR):]


class DynamicResponder:
    """
    Executes scripts through an external CGI interpreter.

    Usage:
        responder = DynamicResponder("php-cgi")
        response = responder.respond(resolved)
    """

    def __init__(self, interpreter: str = "php-cgi"):
        """
        Args:
            interpreter: Interpreter command line, split with shlex. Extra
                         arguments are allowed ("php-cgi -d display_errors=0").
        """
        self.interpreter = interpreter
        self.argv = shlex.split(interpreter)
        if not self.argv:
            raise ValueError("Interpreter command is empty")

    def build_environment(self, resolved: ResolvedTarget) -> Dict[str, str]:
        """CGI environment for one script run, on top of the server's own."""
        return dict(
            os.environ,
            QUERY_STRING=resolved.query,
            REDIRECT_STATUS="200",
            SCRIPT_FILENAME=resolved.path,
        )

    def run(self, resolved: ResolvedTarget) -> bytes:
        """
        Run the interpreter and capture its entire stdout.

        Raises:
            InterpreterError: The interpreter could not be started.
        """
        try:
            result = subprocess.run(
                self.argv,
                env=self.build_environment(resolved),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                check=False,
            )
        except OSError as e:
            logger.error(f"Failed to run {self.interpreter!r}: {e}")
            raise InterpreterError(f"Cannot start interpreter: {e}") from e

        if result.returncode != 0:
            logger.warning(
                f"{self.argv[0]} exited with {result.returncode} for {resolved.path}"
            )

        return result.stdout

    def respond(self, resolved: ResolvedTarget) -> HTTPResponse:
        """
        Build a 200 response from the script's output body.

        Raises:
            InterpreterError: Start failure or malformed output (500).
        """
        body = split_cgi_output(self.run(resolved))
        return ok(body)
