import sys

from discount_engine.cli import main

sys.exit(main())
