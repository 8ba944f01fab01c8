import sys

from solitaire.cli import main

sys.exit(main())
