"""
Preview server for the generated output directory.
"""

import functools
import logging
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer

logger = logging.getLogger('Quire.serve')


class QuietRequestHandler(SimpleHTTPRequestHandler):
    """Serve files, sending request logs to the Quire logger instead of stderr."""

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


def create_server(output_dir, port=8000, host='127.0.0.1'):
    handler = functools.partial(QuietRequestHandler, directory=str(output_dir))
    return ThreadingHTTPServer((host, port), handler)


def serve(output_dir, port=8000, host='127.0.0.1'):
    """Serve output_dir until interrupted."""
    server = create_server(output_dir, port, host)
    logger.info(f"Serving {output_dir} on http://{host}:{server.server_address[1]}/")
    try:
        server.serve_forever()
    finally:
        server.server_close()
