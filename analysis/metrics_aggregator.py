"""
Metrics aggregator - composes the per-company statistics.
Pure functions over an AlignedReturnTable; companies are computed independently.
"""

import logging
from typing import Dict, Iterable, Optional

import numpy as np

from analysis.calculations.capm import capm_regression
from analysis.calculations.hypothesis import welch_t_test
from analysis.calculations.sharpe import daily_risk_free, sharpe_ratio, annualize_sharpe
from analysis.calculations.value_at_risk import historical_var, expected_shortfall
from analysis.calculations.volatility import annualized_volatility
from analysis.series import AlignedReturnTable, CompanyStatistics

logger = logging.getLogger(__name__)


class MetricsAggregatorError(Exception):
    """Raised when metrics aggregation fails."""
    pass


def compute_company_statistics(
    table: AlignedReturnTable,
    company: str,
    *,
    risk_free_annual: float = 0.01,
    var_confidence: float = 0.95,
    test_confidence: float = 0.95
) -> CompanyStatistics:
    """
    Compute every statistic for one company against the table's benchmark.

    Args:
        table: Aligned daily log returns
        company: Company ticker (a column of the table, not the benchmark)
        risk_free_annual: Annual risk-free rate, converted with a 252-day year
        var_confidence: Confidence level for historical VaR
        test_confidence: Confidence level for the t-test interval

    Returns:
        CompanyStatistics

    Raises:
        MetricsAggregatorError: If the company is unknown or is the benchmark
    """
    if company == table.benchmark:
        raise MetricsAggregatorError(f"{company} is the benchmark, not a company")

    if company not in table.companies:
        raise MetricsAggregatorError(f"Company {company} not found in aligned table")

    company_returns = table.returns(company)
    benchmark_returns = table.benchmark_returns()
    rf_daily = daily_risk_free(risk_free_annual)

    capm = capm_regression(company_returns, benchmark_returns)
    sharpe = sharpe_ratio(company_returns, rf_daily)
    test = welch_t_test(company_returns, benchmark_returns, confidence=test_confidence)

    if np.isnan(capm.beta):
        logger.warning(f"Beta undefined for {company}: benchmark returns have zero variance")
    if np.isnan(sharpe):
        logger.warning(f"Sharpe ratio undefined for {company}: returns have zero variance")

    return CompanyStatistics(
        ticker=company,
        beta=capm.beta,
        sharpe_ratio=sharpe,
        var_95=historical_var(company_returns, var_confidence),
        t_statistic=test.t_statistic,
        p_value=test.p_value,
        ci_lower=test.ci_lower,
        ci_upper=test.ci_upper,
        alpha=capm.alpha,
        r_squared=capm.r_squared,
        annualized_sharpe=annualize_sharpe(sharpe),
        annualized_volatility=annualized_volatility(company_returns),
        expected_shortfall=expected_shortfall(company_returns, var_confidence),
        mean_return=float(np.mean(company_returns)),
        observations=len(company_returns)
    )


def compose_statistics(
    table: AlignedReturnTable,
    companies: Optional[Iterable[str]] = None,
    *,
    risk_free_annual: float = 0.01,
    var_confidence: float = 0.95,
    test_confidence: float = 0.95
) -> Dict[str, CompanyStatistics]:
    """
    Compute statistics for each company, keyed by ticker in table order.

    Args:
        table: Aligned daily log returns
        companies: Subset of companies (defaults to all companies in the table)

    Returns:
        Dictionary mapping ticker to CompanyStatistics
    """
    if companies is None:
        companies = table.companies

    results = {}
    for company in companies:
        results[company] = compute_company_statistics(
            table,
            company,
            risk_free_annual=risk_free_annual,
            var_confidence=var_confidence,
            test_confidence=test_confidence
        )
        logger.info(
            f"Statistics for {company}: beta={results[company].beta:.3f}, "
            f"sharpe={results[company].sharpe_ratio:.3f}, var={results[company].var_95:.4f}"
        )

    return results
