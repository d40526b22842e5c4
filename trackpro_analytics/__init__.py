"""TrackPro - track and field performance and training analytics."""

__version__ = "0.1.0"
