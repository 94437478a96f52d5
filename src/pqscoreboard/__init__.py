"""
PQScoreboard - Scoreboard Editor and Presenter

Keeps a team-by-category score grid and reveals the results step by step
on a presentation display (browser page, CasparCG or OBS).
"""

__version__ = "1.0.0"
__author__ = "PQScoreboard Contributors"
