"""EstimateMC: estimate ranges and a Monte Carlo histogram."""

__version__ = "0.1.0"
