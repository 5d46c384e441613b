import sys

from jsfold.cli import main

sys.exit(main())
