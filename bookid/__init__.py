"""Identify books from ISBNs or free-form queries via the Google Books API."""

__version__ = "0.1.0"