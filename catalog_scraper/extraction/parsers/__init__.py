"""
Specialized parsers for product data extraction.

- StructuredDataParser: JSON-LD structured data (schema.org)
"""

from .structured_data import StructuredDataParser

__all__ = ['StructuredDataParser']
