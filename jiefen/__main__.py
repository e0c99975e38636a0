import sys

from jiefen.cli import main

sys.exit(main())
