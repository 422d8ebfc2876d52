"""ContentForge: turn text, PDFs and YouTube videos into captions and video scripts."""

__version__ = "1.0.0"
