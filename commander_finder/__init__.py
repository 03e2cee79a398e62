"""Commander Finder

A command-line tool that searches Scryfall for commanders by color identity,
picks one at random on request, and keeps a list of favorite commanders.
"""

__version__ = "0.1.0"
__author__ = "Commander Finder"
__description__ = "Find commanders by color identity on Scryfall"
