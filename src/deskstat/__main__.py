"""Allow running Deskstat with ``python -m deskstat``."""

import sys

from .cli import main

sys.exit(main())
