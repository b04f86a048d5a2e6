"""parkmeter: slot allocation and metered billing for parking lots."""

__version__ = "0.1.0"
