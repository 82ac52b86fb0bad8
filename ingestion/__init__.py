"""
Data Ingestion Module

Handles fetching and validating data from external sources:
- yfinance for adjusted-close price data
"""

__version__ = "0.1.0"
