"""Read quiz questions from Word documents, pack them into .dou archives and preview them on the web."""

__version__ = "0.1.0"