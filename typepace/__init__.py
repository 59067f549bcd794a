"""TypePace - typing speed tracking with rolling averages and terminal charts."""

__version__ = "0.1.0"
