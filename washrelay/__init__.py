"""washrelay - LINE notification relay for shared washing machines."""

__version__ = "0.1.0"
