"""Product Catalog Service - product lifecycle and approval workflow."""

__version__ = "0.1.0"
