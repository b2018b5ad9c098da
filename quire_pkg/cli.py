#!/usr/bin/env python3
"""
Command-line interface for Quire - static site generator.
"""

import os
import sys
import time
import argparse
from typing import List, Optional

from . import __version__
from .core import run, setup_logging
from .errors import QuireError
from .serve import serve
from .settings import QuireSettings
from .watch import watch


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='quire', description='Quire - Static Site Generator')
    parser.add_argument('config', nargs='?',
                        help='Path to config file (defaults to quire.json, quire.yml or quire.yaml)')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated site')
    parser.add_argument('--site-url', type=str,
                        help='Base URL prefixed to absolute page URLs')
    parser.add_argument('--workers', type=int,
                        help='Number of worker threads per stage')
    parser.add_argument('--collect-errors', action='store_true',
                        help='Report every invalid content file before aborting')
    parser.add_argument('--watch', action='store_true',
                        help='Watch the source directory and rebuild on changes')
    parser.add_argument('--serve', action='store_true',
                        help='Serve the output directory')
    parser.add_argument('--port', type=int, default=8000,
                        help='Port to bind when serving')
    parser.add_argument('--verbose', action='store_true',
                        help='Show debug output on the console')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings_loader = QuireSettings(config_dir=os.getcwd())
        settings_loader.load_settings(args.config)
        settings_loader.merge_with_args({
            'output_dir': args.output,
            'site_url': args.site_url,
            'workers': args.workers,
        })
        config = settings_loader.to_config()
    except QuireError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logger = setup_logging(verbose=args.verbose, log_dir=config.log_dir)
    logger.info(f"Running initial generation for {os.path.relpath(settings_loader.config_file_path)}")

    try:
        run(config, collect_errors=args.collect_errors)
    except QuireError as e:
        if not args.watch:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        logger.error(f"Build failed: {e}")

    observer = watch(config, collect_errors=args.collect_errors) if args.watch else None
    try:
        if args.serve:
            serve(config.output_dir, port=args.port)
        elif observer is not None:
            while observer.is_alive():
                time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        if observer is not None:
            observer.stop()
            observer.join()


if __name__ == '__main__':
    main()
