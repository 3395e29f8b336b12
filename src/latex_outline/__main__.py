"""Entry point for ``python -m latex_outline``."""

import sys

from latex_outline.cli import main

sys.exit(main())
