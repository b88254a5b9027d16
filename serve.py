#!/usr/bin/env python3
"""
Local preview server for the generated site.
Run this after building the site; content pages are served as folder/index.html.
"""

from __future__ import annotations

import argparse
import functools
import http.server
import logging
import socketserver
import sys
import webbrowser
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("serve")


def make_handler(site_path: Path):
    return functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(site_path))


def serve_site(site_dir: Path = Path("_dist"), port: int = 8000, open_browser: bool = True) -> bool:
    site_path = Path(site_dir)
    if not site_path.is_dir():
        logger.error("Site directory '%s' doesn't exist. Run build_static_site.py first.", site_dir)
        return False

    with socketserver.TCPServer(("", port), make_handler(site_path)) as httpd:
        url = f"http://localhost:{port}"
        logger.info("Serving %s at %s (Ctrl+C to stop)", site_path, url)

        if open_browser:
            webbrowser.open(url)

        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Server stopped.")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the generated site locally.")
    parser.add_argument("site_dir", nargs="?", type=Path, default=Path("_dist"))
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-browser", action="store_true", help="Do not open a browser window")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    return 0 if serve_site(args.site_dir, args.port, open_browser=not args.no_browser) else 1


if __name__ == "__main__":
    sys.exit(main())
