"""
Chart builders for the risk report.

Each function takes pipeline outputs and returns a matplotlib Figure so the
renderer decides where it is written. Nothing here feeds back into the
statistics.
"""

from pathlib import Path
from typing import Dict, Mapping

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from analysis.series import AlignedReturnTable, CompanyStatistics


def plot_cumulative_growth(table: AlignedReturnTable):
    """Growth of 1 unit invested at the start of the aligned window."""
    frame = table.frame
    growth = np.exp(frame.cumsum())

    fig, ax = plt.subplots(figsize=(9, 5))
    for column in frame.columns:
        linestyle = "--" if column == table.benchmark else "-"
        ax.plot(growth.index, growth[column], linestyle=linestyle, linewidth=1.3, label=column)

    ax.axhline(1.0, color="gray", linewidth=0.8, alpha=0.6)
    ax.set_title("Cumulative growth of 1 unit")
    ax.set_ylabel("Growth multiple")
    ax.legend(loc="best")
    fig.autofmt_xdate()
    fig.tight_layout()
    return fig


def plot_returns_with_rolling_mean(
    table: AlignedReturnTable,
    smoothed: pd.DataFrame,
    window: int
):
    """One panel per ticker: daily log returns with the trailing rolling mean on top."""
    frame = table.frame
    columns = list(frame.columns)

    fig, axes = plt.subplots(len(columns), 1, figsize=(9, 2.2 * len(columns)), sharex=True)
    axes = np.atleast_1d(axes)

    for ax, column in zip(axes, columns):
        ax.plot(frame.index, frame[column], color="C0", linewidth=0.7, alpha=0.5, label="Daily")
        ax.plot(smoothed.index, smoothed[column], color="C3", linewidth=1.4, label=f"{window}-day mean")
        ax.axhline(0.0, color="gray", linewidth=0.6)
        ax.set_ylabel(column)

    axes[0].set_title("Daily log returns")
    axes[0].legend(loc="upper right", fontsize="small")
    fig.autofmt_xdate()
    fig.tight_layout()
    return fig


def plot_security_market_line(
    statistics: Mapping[str, CompanyStatistics],
    risk_free_daily: float,
    market_mean: float
):
    """
    Security market line with each company's realized mean return at its beta.

    Companies with undefined beta are left off the chart.
    """
    points = {t: s for t, s in statistics.items() if np.isfinite(s.beta)}
    max_beta = max([1.0] + [s.beta for s in points.values()]) * 1.2
    min_beta = min([0.0] + [s.beta for s in points.values()])
    betas = np.linspace(min_beta, max_beta, 50)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(betas, risk_free_daily + betas * (market_mean - risk_free_daily),
            color="C0", linewidth=1.5, label="Security market line")
    ax.scatter([1.0], [market_mean], marker="^", s=60, color="C1", zorder=5, label="Benchmark")

    for ticker, stats_ in points.items():
        ax.scatter(stats_.beta, stats_.mean_return, s=50, zorder=5)
        ax.annotate(ticker, (stats_.beta, stats_.mean_return),
                    textcoords="offset points", xytext=(5, 5))

    ax.set_xlabel("Beta")
    ax.set_ylabel("Mean daily return")
    ax.set_title("Security market line")
    ax.legend(loc="best")
    fig.tight_layout()
    return fig


def plot_return_distribution(
    table: AlignedReturnTable,
    statistics: Mapping[str, CompanyStatistics],
    confidence: float
):
    """Histogram of each company's returns with its historical VaR marked."""
    companies = list(statistics.keys())
    n_cols = 2
    n_rows = int(np.ceil(len(companies) / n_cols))

    fig, axes = plt.subplots(n_rows, n_cols, figsize=(9, 3 * n_rows), squeeze=False)

    for ax, ticker in zip(axes.flat, companies):
        ax.hist(table.returns(ticker), bins=40, color="C0", alpha=0.7)
        var = statistics[ticker].var_95
        ax.axvline(var, color="C3", linestyle="--", linewidth=1.2,
                   label=f"VaR {confidence:.0%}: {var:.2%}")
        ax.set_title(ticker)
        ax.legend(loc="upper left", fontsize="small")

    # Hide unused panels
    for ax in list(axes.flat)[len(companies):]:
        ax.set_visible(False)

    fig.suptitle("Distribution of daily log returns")
    fig.tight_layout()
    return fig


def save_figure(fig, path: Path, dpi: int = 120) -> Path:
    """Write figure as PNG and release it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fig.savefig(path, dpi=dpi)
    finally:
        plt.close(fig)
    return path


def build_report_charts(
    chart_paths: Dict[str, Path],
    table: AlignedReturnTable,
    smoothed: pd.DataFrame,
    statistics: Mapping[str, CompanyStatistics],
    *,
    window: int,
    risk_free_daily: float,
    var_confidence: float
) -> Dict[str, Path]:
    """Render every chart to the path registered under its key."""
    figures = {
        'cumulative_growth': lambda: plot_cumulative_growth(table),
        'rolling_returns': lambda: plot_returns_with_rolling_mean(table, smoothed, window),
        'security_market_line': lambda: plot_security_market_line(
            statistics, risk_free_daily, float(np.mean(table.benchmark_returns()))
        ),
        'return_distribution': lambda: plot_return_distribution(table, statistics, var_confidence),
    }

    written = {}
    for key, build in figures.items():
        if key in chart_paths:
            written[key] = save_figure(build(), chart_paths[key])
    return written
