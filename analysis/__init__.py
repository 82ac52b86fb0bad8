"""
Analysis Engine Module

Calculates risk statistics from aligned daily log returns:
- Log returns and inner-join alignment on date
- Trailing rolling means (display only)
- CAPM beta, Sharpe ratio, historical VaR
- Welch t-test against the benchmark
"""

__version__ = "0.1.0"
