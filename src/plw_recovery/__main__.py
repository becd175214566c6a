"""
Entry point for running plw_recovery as a module.

Usage:
    python -m plw_recovery info /path/to/log.plw
    python -m plw_recovery decode /path/to/log.plw --head 10
    python -m plw_recovery validate /path/to/log.plw
    python -m plw_recovery units
"""

from .cli import main

if __name__ == "__main__":
    main()
