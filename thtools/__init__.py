"""Stage background and dialogue file conversion, archive version detection, and the ciphers these game data formats use."""

__version__ = "0.1.0"