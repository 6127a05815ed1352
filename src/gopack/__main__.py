import sys

from gopack.main import main

sys.exit(main())
