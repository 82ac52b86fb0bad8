"""
Markdown template for rendering the risk report.
Pure function - no I/O, just template rendering.
"""

from typing import Dict, Any

from reports.formatters import (
    format_percentage,
    format_ratio,
    format_pvalue,
    format_interval,
    format_date_display
)


REQUIRED_FIELDS = ['benchmark', 'data_period', 'parameters', 'statistics', 'generated_at']

CHART_TITLES = [
    ('cumulative_growth', 'Cumulative Growth'),
    ('rolling_returns', 'Daily Returns and Rolling Mean'),
    ('security_market_line', 'Security Market Line'),
    ('return_distribution', 'Return Distributions and VaR'),
]


class TemplateError(Exception):
    """Raised when template rendering fails."""
    pass


def render_risk_report(context: Dict[str, Any]) -> str:
    """
    Render the risk report context to Markdown.

    Args:
        context: Report context built by the pipeline. Statistics are the
            JSON-safe dictionaries from CompanyStatistics.to_dict().

    Returns:
        Formatted Markdown string

    Raises:
        TemplateError: If required fields are missing or malformed
    """
    if not context:
        raise TemplateError("Empty or invalid report context provided")

    for field in REQUIRED_FIELDS:
        if field not in context:
            raise TemplateError(f"Missing required field: {field}")

    if not isinstance(context['statistics'], dict) or not context['statistics']:
        raise TemplateError("Invalid data structure: statistics must be a non-empty dict")

    sections = [
        _render_header(context),
        _render_parameters(context['parameters']),
        _render_capm(context),
        _render_performance(context),
        _render_var(context),
        _render_hypothesis(context),
        _render_charts(context.get('charts', {})),
        _render_footer(context)
    ]

    return '\n\n'.join(section for section in sections if section) + '\n'


def _render_header(context: Dict[str, Any]) -> str:
    period = context['data_period']
    companies = ', '.join(context['statistics'].keys())

    return f"""# Auto Manufacturer Risk Report

**Companies:** {companies}
**Benchmark:** {context['benchmark']}
**Data Period:** {format_date_display(period.get('start_date'))} to {format_date_display(period.get('end_date'))} ({period.get('observations', 0)} aligned trading days)

---"""


def _render_parameters(parameters: Dict[str, Any]) -> str:
    lines = [
        "## Parameters",
        "| Parameter | Value |",
        "|-----------|-------|",
        f"| Lookback window | {parameters.get('lookback_days')} calendar days |",
        f"| Annual risk-free rate | {format_percentage(parameters.get('risk_free_annual'))} |",
        f"| Daily risk-free rate | {format_percentage(parameters.get('risk_free_daily'), 5)} |",
        f"| VaR confidence | {format_percentage(parameters.get('var_confidence'), 0)} |",
        f"| t-test confidence | {format_percentage(parameters.get('test_confidence'), 0)} |",
        f"| Rolling mean window | {parameters.get('rolling_window')} days |",
    ]
    return '\n'.join(lines)


def _render_capm(context: Dict[str, Any]) -> str:
    sml = context.get('security_market_line', {})
    lines = [
        "## CAPM Beta",
        "OLS regression of daily company log returns on benchmark log returns.",
        "",
        "| Company | Beta | Alpha (daily) | R² | SML expected daily return | Realized mean daily return |",
        "|---------|------|---------------|----|---------------------------|----------------------------|",
    ]
    for ticker, stats in context['statistics'].items():
        lines.append(
            f"| {ticker} | {format_ratio(stats.get('beta'))} | "
            f"{format_percentage(stats.get('alpha'), 4)} | {format_ratio(stats.get('r_squared'))} | "
            f"{format_percentage(sml.get(ticker), 4)} | {format_percentage(stats.get('mean_return'), 4)} |"
        )
    return '\n'.join(lines)


def _render_performance(context: Dict[str, Any]) -> str:
    lines = [
        "## Sharpe Ratio",
        "| Company | Daily Sharpe | Annualized Sharpe | Annualized Volatility |",
        "|---------|--------------|-------------------|-----------------------|",
    ]
    for ticker, stats in context['statistics'].items():
        lines.append(
            f"| {ticker} | {format_ratio(stats.get('sharpe_ratio'))} | "
            f"{format_ratio(stats.get('annualized_sharpe'))} | "
            f"{format_percentage(stats.get('annualized_volatility'))} |"
        )
    return '\n'.join(lines)


def _render_var(context: Dict[str, Any]) -> str:
    confidence = context['parameters'].get('var_confidence')
    lines = [
        f"## Value at Risk ({format_percentage(confidence, 0)})",
        "Historical VaR: empirical quantile of daily log returns. Negative values are losses.",
        "",
        "| Company | VaR | Expected Shortfall |",
        "|---------|-----|--------------------|",
    ]
    for ticker, stats in context['statistics'].items():
        lines.append(
            f"| {ticker} | {format_percentage(stats.get('var_95'))} | "
            f"{format_percentage(stats.get('expected_shortfall'))} |"
        )
    return '\n'.join(lines)


def _render_hypothesis(context: Dict[str, Any]) -> str:
    confidence = context['parameters'].get('test_confidence')
    lines = [
        "## Welch t-test: Company vs Benchmark Returns",
        f"H0: mean company return equals mean {context['benchmark']} return. "
        f"Interval is the {format_percentage(confidence, 0)} confidence interval for the mean difference.",
        "",
        "| Company | t-statistic | p-value | Confidence interval |",
        "|---------|-------------|---------|---------------------|",
    ]
    for ticker, stats in context['statistics'].items():
        lines.append(
            f"| {ticker} | {format_ratio(stats.get('t_statistic'))} | "
            f"{format_pvalue(stats.get('p_value'))} | "
            f"{format_interval(stats.get('ci_lower'), stats.get('ci_upper'))} |"
        )
    return '\n'.join(lines)


def _render_charts(charts: Dict[str, str]) -> str:
    if not charts:
        return ''

    lines = ["## Charts"]
    for key, title in CHART_TITLES:
        if key in charts:
            lines.append(f"### {title}")
            lines.append(f"![{title}]({charts[key]})")
    return '\n\n'.join(lines)


def _render_footer(context: Dict[str, Any]) -> str:
    return f"""---

*Generated {context['generated_at']} from Yahoo Finance adjusted-close prices.*"""
