#!/usr/bin/env python3
"""
Entry point for frozen (PyInstaller) builds of the minikube toolkit.

Runs the click command line with the same logging setup as the package.
"""

import logging
import sys
import traceback

# Force UTF-8 encoding for stdout/stderr on Windows
if sys.platform == 'win32':
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')

logger = logging.getLogger("minikube_toolkit.run")


def global_exception_handler(exc_type, exc_value, exc_tb):
    """Log unhandled exceptions before the process exits."""
    logger.error("=" * 60)
    logger.error(f"UNHANDLED EXCEPTION: {exc_type.__name__}: {exc_value}")
    for line in traceback.format_tb(exc_tb):
        for subline in line.strip().split('\n'):
            logger.error(f"  {subline}")
    logger.error("=" * 60)
    sys.stdout.flush()
    sys.stderr.flush()


sys.excepthook = global_exception_handler


def main():
    # Import directly for PyInstaller compatibility
    from minikube_toolkit.cli import main as cli_main

    try:
        cli_main()
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
