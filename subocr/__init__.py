# subocr/__init__.py
"""Command-line front end for subocr_core."""
