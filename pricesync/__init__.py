"""Scheduled stock price scraping into a spreadsheet."""

__version__ = "1.0.0"
