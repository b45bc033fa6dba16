"""PasteForge: pastebin service backed by a hosted JSON document store"""

__version__ = "1.0.0"
