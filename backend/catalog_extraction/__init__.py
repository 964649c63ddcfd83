"""
Catalog extraction module.

This module provides functionality to extract the named image assets of a
parsed asset catalog into a directory tree, rebuilding the folder hierarchy
encoded in asset group names and writing each asset as PNG or single-page PDF.
"""
