#!/usr/bin/env python3
"""
Rule-based Batch Rename Tool - Launcher

Supports:
- GUI mode (default startup), optionally opening a folder
- CLI mode (--cli or -c parameter)

Usage:
    python main.py                              # GUI mode (default)
    python main.py ./photos                     # GUI mode, folder opened
    python main.py --cli                        # CLI interactive mode
    python main.py -c list ./dir                # CLI command mode
    python main.py -c preview ./dir --case lower --number
    python main.py -c rename ./dir --prefix "x_" --log-dir ./logs
    python main.py -c undo ./dir --log ./logs/rename_result_....json
"""

import logging
import sys
from typing import List, Optional

CLI_FLAGS = ("--cli", "-c")

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Dispatch to the CLI or the GUI"""
    argv = list(sys.argv[1:] if argv is None else argv)

    if any(arg in CLI_FLAGS for arg in argv):
        from cli import main as cli_main
        return cli_main([arg for arg in argv if arg not in CLI_FLAGS])

    try:
        from gui import main as gui_main
    except ImportError as e:
        logger.debug("GUI import failed", exc_info=True)
        print("Error: Unable to start GUI, please ensure PySide6 is installed")
        print(f"Detailed error: {e}")
        print("\nInstall command: pip install PySide6")
        print("\nTo use CLI mode, run:")
        print("    python main.py --cli")
        return 1
    return gui_main(argv)


if __name__ == "__main__":
    sys.exit(main())
