"""BiasLens: news bias scoring and narrative clustering."""

__version__ = "1.0.0"
