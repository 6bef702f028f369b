import sys

from toyc.cli import main

sys.exit(main())
