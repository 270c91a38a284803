import sys

from plan_execute.cli import main

sys.exit(main())
