"""Run with: python -m pqscoreboard"""

from .run import main

main()
