"""Allow ``python -m homely_bridge``."""

import sys

from homely_bridge.cli import main

sys.exit(main())
