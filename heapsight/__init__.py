"""Models, aggregation and formatting for analysing heap allocation traces."""

__version__ = "0.1.0"

__all__ = [
    "analysis",
    "costs",
    "histogrammodel",
    "merge",
    "stacksmodel",
    "suppressionsmodel",
    "topproxy",
    "treemodel",
    "treeproxy",
    "util",
]