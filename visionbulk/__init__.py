"""VisionBulk: turn a script into a sequence of consistently illustrated scenes."""

__version__ = "0.1.0"
