"""sheetstage: multi-sheet tabular staging engine for import wizards."""

__version__ = "0.1.0"
