"""Allow ``python -m planet_browser``."""

import sys

from planet_browser.cli import main

if __name__ == "__main__":
    sys.exit(main())
