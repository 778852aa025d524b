import sys

from jploot.cli import main

sys.exit(main())
