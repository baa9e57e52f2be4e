import sys

from ginkou.cli import main

sys.exit(main())
