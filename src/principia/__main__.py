import sys

from principia.main import main

sys.exit(main())
