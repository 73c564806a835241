"""FitTrack - personal health and fitness tracking backend."""

__version__ = "1.0.0"
