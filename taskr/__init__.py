"""taskr - nested checklist manager driven by typed task paths."""

__version__ = "0.1.0"
