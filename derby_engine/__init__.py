"""Horse-race simulation, odds and settlement engine."""

__version__ = "0.1.0"
