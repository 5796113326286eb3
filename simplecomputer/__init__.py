"""A terminal emulator of a small educational computer, with its assembler."""

__version__ = "0.1.0"
__all__ = ["__version__"]