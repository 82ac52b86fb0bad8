"""
Risk report DAG - orchestrates the complete report pipeline.
Composes: Provider → Normalize → Validate → Returns → Statistics → Render → Write.
"""

import logging
import warnings
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, Any, Optional, List, Mapping, Callable

import numpy as np
import pandas as pd

from analysis.calculations.capm import security_market_line
from analysis.calculations.returns import returns_by_ticker, align_returns
from analysis.calculations.sharpe import daily_risk_free
from analysis.calculations.smoothing import smooth_returns
from analysis.calculations.volatility import annualized_volatility
from analysis.guardrails import validate_sufficient_observations, DataQualityWarning
from analysis.metrics_aggregator import compose_statistics
from analysis.series import AlignedReturnTable, CompanyStatistics, PriceSeries
from ingestion.providers.yfinance_adapter import fetch_price_history
from ingestion.transforms.normalizers import normalize_price_history
from ingestion.transforms.validators import validate_price_history
from reports.atomic_writer import (
    write_report_atomic,
    write_metrics_sidecar,
    json_safe,
    atomic_directory
)
from reports.charts import build_report_charts
from reports.markdown_template import render_risk_report
from reports.path_policy import create_report_paths, run_layout, relative_to_report

logger = logging.getLogger(__name__)

MAX_LOOKBACK_DAYS = 365 * 3


@dataclass
class RiskReportConfig:
    """Configuration for the risk report pipeline."""
    tickers: List[str]
    benchmark: str
    lookback_days: int = 365
    risk_free_annual: float = 0.01
    var_confidence: float = 0.95
    test_confidence: float = 0.95
    rolling_window: int = 7
    min_observations: int = 60
    end_date: Optional[date] = None
    output_dir: Path = Path('./reports_output')
    fetch_timeout: float = 10.0
    fetch_retries: int = 1
    include_charts: bool = True

    def __post_init__(self):
        """Validate and set defaults."""
        if not self.tickers or not all(isinstance(t, str) and t for t in self.tickers):
            raise ValueError("tickers must be a non-empty list of strings")

        self.tickers = list(self.tickers)
        if len(set(self.tickers)) != len(self.tickers):
            raise ValueError("tickers must not contain duplicates")

        if not self.benchmark or not isinstance(self.benchmark, str):
            raise ValueError("benchmark must be non-empty string")

        if self.benchmark in self.tickers:
            raise ValueError(f"benchmark {self.benchmark} must not also be a company ticker")

        if not 1 <= self.lookback_days <= MAX_LOOKBACK_DAYS:
            raise ValueError(f"lookback_days must be between 1 and {MAX_LOOKBACK_DAYS}")

        for name in ('var_confidence', 'test_confidence'):
            value = getattr(self, name)
            if not 0 < value < 1:
                raise ValueError(f"{name} must be in (0, 1), got {value}")

        if not -1 < self.risk_free_annual < 1:
            raise ValueError(f"risk_free_annual must be a decimal rate, got {self.risk_free_annual}")

        if self.rolling_window < 1:
            raise ValueError("rolling_window must be >= 1")

        if self.fetch_retries < 0 or self.fetch_timeout <= 0:
            raise ValueError("fetch_retries must be >= 0 and fetch_timeout > 0")

        if self.end_date is None:
            self.end_date = date.today()

        self.output_dir = Path(self.output_dir)

    @property
    def start_date(self) -> date:
        return self.end_date - timedelta(days=self.lookback_days)

    @property
    def all_symbols(self) -> List[str]:
        return self.tickers + [self.benchmark]


@dataclass(frozen=True, eq=False)
class RiskAnalysis:
    """Everything computed from one run's prices; presentation reads from here."""
    table: AlignedReturnTable
    smoothed: pd.DataFrame
    statistics: Dict[str, CompanyStatistics]
    security_market_line: Dict[str, float]
    risk_free_daily: float
    market_mean: float
    market_volatility: float


def build_analysis(prices: Mapping[str, PriceSeries], config: RiskReportConfig) -> RiskAnalysis:
    """
    Pure analysis stage: prices to statistics, no IO.

    Args:
        prices: Normalized price series keyed by ticker (companies and benchmark)
        config: Pipeline configuration

    Returns:
        RiskAnalysis

    Raises:
        ValidationError: If a required series is missing
        InsufficientDataError: If any series or the aligned table is too short
    """
    validate_price_history(prices, config.all_symbols)

    ordered = {ticker: prices[ticker] for ticker in config.all_symbols}
    table = align_returns(returns_by_ticker(ordered), config.benchmark)

    validate_sufficient_observations(table, config.min_observations)

    statistics = compose_statistics(
        table,
        config.tickers,
        risk_free_annual=config.risk_free_annual,
        var_confidence=config.var_confidence,
        test_confidence=config.test_confidence
    )

    rf_daily = daily_risk_free(config.risk_free_annual)
    benchmark_returns = table.benchmark_returns()
    market_mean = float(np.mean(benchmark_returns))

    return RiskAnalysis(
        table=table,
        smoothed=smooth_returns(table, config.rolling_window),
        statistics=statistics,
        security_market_line=security_market_line(
            {t: s.beta for t, s in statistics.items()}, rf_daily, market_mean
        ),
        risk_free_daily=rf_daily,
        market_mean=market_mean,
        market_volatility=annualized_volatility(benchmark_returns)
    )


def build_report_context(
    analysis: RiskAnalysis,
    config: RiskReportConfig,
    generated_at: datetime,
    charts: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """Assemble the JSON-safe context consumed by the Markdown template and metrics sidecar."""
    dates = analysis.table.dates

    return json_safe({
        'benchmark': config.benchmark,
        'generated_at': generated_at.strftime('%Y-%m-%d %H:%M:%S'),
        'data_period': {
            'requested_start': config.start_date.isoformat(),
            'requested_end': config.end_date.isoformat(),
            'start_date': dates[0].isoformat(),
            'end_date': dates[-1].isoformat(),
            'observations': len(analysis.table)
        },
        'parameters': {
            'lookback_days': config.lookback_days,
            'risk_free_annual': config.risk_free_annual,
            'risk_free_daily': analysis.risk_free_daily,
            'var_confidence': config.var_confidence,
            'test_confidence': config.test_confidence,
            'rolling_window': config.rolling_window
        },
        'benchmark_summary': {
            'mean_return': analysis.market_mean,
            'annualized_volatility': analysis.market_volatility
        },
        'statistics': {t: s.to_dict() for t, s in analysis.statistics.items()},
        'security_market_line': analysis.security_market_line,
        'charts': charts or {}
    })


def run_risk_report(
    config: RiskReportConfig,
    fetcher: Callable[..., Dict[str, List[Dict[str, Any]]]] = fetch_price_history,
    run_timestamp: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Run the complete risk report pipeline.

    Pipeline stages:
    1. Fetch raw data for every company and the benchmark
    2. Normalize to adjusted-close price series
    3. Derive and align returns, compute statistics
    4. Render charts and Markdown report
    5. Write report and metrics sidecar, then move the run directory into place

    Any failure aborts the run: status is 'failed' and nothing is left in
    the output directory. A run directory that already exists is never
    overwritten; the new run gets a numeric suffix.

    Args:
        config: Pipeline configuration
        fetcher: Provider function (symbols, start, end, timeout=, max_retries=) -> raw rows
        run_timestamp: Timestamp used for output paths (defaults to now)

    Returns:
        Dictionary with run results and metrics
    """
    start_time = datetime.now()
    run_timestamp = run_timestamp or start_time

    result = {
        'tickers': config.tickers,
        'benchmark': config.benchmark,
        'start_date': config.start_date,
        'end_date': config.end_date,
        'status': 'running',
        'rows_fetched': {},
        'observations': 0,
        'data_quality_warnings': [],
        'report_path': None,
        'metrics_path': None,
        'statistics': {},
        'error_message': None
    }

    try:
        # Stage 1: Fetch raw data from provider
        logger.info(
            f"Fetching {', '.join(config.all_symbols)} from {config.start_date} to {config.end_date}"
        )
        raw_history = fetcher(
            config.all_symbols,
            config.start_date,
            config.end_date,
            timeout=config.fetch_timeout,
            max_retries=config.fetch_retries
        )
        result['rows_fetched'] = {t: len(rows) for t, rows in raw_history.items()}

        # Stage 2: Normalize to canonical price series
        prices = normalize_price_history(raw_history)

        # Stage 3: Returns and statistics
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always', DataQualityWarning)
            analysis = build_analysis(prices, config)

        for warning in caught:
            if issubclass(warning.category, DataQualityWarning):
                logger.warning(str(warning.message))
                result['data_quality_warnings'].append(str(warning.message))
            else:
                warnings.warn_explicit(warning.message, warning.category, warning.filename, warning.lineno)

        result['observations'] = len(analysis.table)

        # Stages 4-5: Render and write into a staging directory that only
        # becomes the run directory once every file is in place
        paths = create_report_paths(run_timestamp, config.output_dir, avoid_collisions=True)
        with atomic_directory(paths['run_dir']) as staging_dir:
            staged = run_layout(staging_dir)
            chart_links = {}
            if config.include_charts:
                written = build_report_charts(
                    staged['chart_paths'],
                    analysis.table,
                    analysis.smoothed,
                    analysis.statistics,
                    window=config.rolling_window,
                    risk_free_daily=analysis.risk_free_daily,
                    var_confidence=config.var_confidence
                )
                chart_links = {
                    k: relative_to_report(p, staged['report_path']) for k, p in written.items()
                }

            context = build_report_context(analysis, config, run_timestamp, chart_links)
            report_content = render_risk_report(context)

            write_report_atomic(report_content, staged['report_path'])
            write_metrics_sidecar(context, staged['metrics_path'])

        result['report_path'] = str(paths['report_path'])
        result['metrics_path'] = str(paths['metrics_path'])
        result['statistics'] = context['statistics']
        result['status'] = 'completed'
        logger.info(f"Risk report written to {paths['report_path']}")

    except Exception as e:
        # Pipeline failed - record failure
        logger.error(f"Risk report failed: {e}")
        result['status'] = 'failed'
        result['error_message'] = str(e)
        result['error_type'] = type(e).__name__

    result['duration_seconds'] = (datetime.now() - start_time).total_seconds()
    return result
