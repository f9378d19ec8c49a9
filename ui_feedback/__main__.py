import sys

from ui_feedback.cli import main

sys.exit(main())
