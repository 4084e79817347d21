"""Portfolio Hub: portfolio, project and skill management backend."""

__version__ = "0.1.0"
