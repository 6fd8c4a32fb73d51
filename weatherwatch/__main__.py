"""Allow `python -m weatherwatch`."""

import sys

from weatherwatch.cli import main

sys.exit(main())
