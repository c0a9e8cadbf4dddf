import sys

from rpcreator.cli import main

sys.exit(main())
