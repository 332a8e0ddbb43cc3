"""
=============================================================================
FILESERVER - A Minimal Sequential HTTP/1.1 File Server
=============================================================================

Serves files from one root directory over raw sockets, one connection at
a time. Static files go out as-is with a Content-Type from a small MIME
table; .php files are run through php-cgi and their output is relayed.

    $ fileserver -p 8080 /var/www
    $ curl -i http://localhost:8080/index.html
    HTTP/1.1 200 OK
    Connection: close
    Content-Length: 1337
    Content-Type: text/html

=============================================================================
WHAT IT DOES NOT DO
=============================================================================

    • methods other than GET
    • keep-alive (every response closes the connection)
    • chunked transfer encoding, TLS
    • concurrency (a slow client holds up everyone behind it)
    • directory listings or extensionless paths

=============================================================================
EMBEDDING
=============================================================================

    from fileserver import FileServer, ServerConfig

    server = FileServer(ServerConfig(root="./public", port=8080))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "__version__"]
