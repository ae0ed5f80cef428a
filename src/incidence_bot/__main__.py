"""Allow running the bot with ``python -m incidence_bot``."""

import sys

from incidence_bot.cli import main

if __name__ == "__main__":
    sys.exit(main())
