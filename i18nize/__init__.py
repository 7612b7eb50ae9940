"""Extract natural-language literals from source files into locale catalogs."""

__version__ = "0.3.0"
