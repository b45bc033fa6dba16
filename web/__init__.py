"""HTTP layer for PasteForge"""
