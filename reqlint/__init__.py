"""reqlint — requirement annotation linter for guideline documentation."""

__version__ = "0.1.0"
