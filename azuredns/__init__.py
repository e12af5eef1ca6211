"""Manage the records of an Azure DNS zone: record types, conversions, HTTP client and provider."""

__version__ = "1.0.0"

__all__ = ["cli", "client", "convert", "provider", "records"]