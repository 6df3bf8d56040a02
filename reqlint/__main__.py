"""Allow running as: python -m reqlint"""

import sys

from reqlint.main import main

if __name__ == "__main__":
    sys.exit(main())
