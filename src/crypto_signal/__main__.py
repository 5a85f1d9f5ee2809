"""Allow `python -m crypto_signal`."""

import sys

from crypto_signal.cli import main

sys.exit(main())
