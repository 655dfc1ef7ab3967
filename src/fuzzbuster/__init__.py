"""
fuzzbuster - content and virtual host discovery fuzzer
"""

__all__ = ["__version__"]
__version__ = "1.0.0"
