"""Allow ``python -m twinscan``."""

from twinscan import main

main()
