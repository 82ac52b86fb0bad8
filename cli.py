#!/usr/bin/env python3
"""
Main CLI for the auto manufacturer risk report.
Usage: python cli.py report [options]
"""

import os
import sys
import argparse
import logging
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from pipeline.risk_report_dag import run_risk_report, RiskReportConfig
from pipeline.settings import load_config, SettingsError
from reports.formatters import format_ratio, format_percentage, format_pvalue


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Risk and performance report for auto manufacturers vs a market index',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py report
  python cli.py report --lookback-days 180 --risk-free 0.045
  python cli.py report --end 2025-06-30 --output-dir ./out
  python cli.py show-config
        """
    )
    parser.add_argument('--config',
                        help='Path to YAML settings (default: config/risk_report.yml)')
    parser.add_argument('--verbose', '-v',
                        action='store_true',
                        help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    report = subparsers.add_parser('report', help='Fetch prices and write the risk report')
    report.add_argument('--end',
                        type=date.fromisoformat,
                        help='Last date of the window (YYYY-MM-DD, default: today)')
    report.add_argument('--lookback-days',
                        type=int,
                        help='Trailing window length in calendar days (default: 365)')
    report.add_argument('--risk-free',
                        type=float,
                        help='Annual risk-free rate as decimal (default: 0.01)')
    report.add_argument('--output-dir',
                        type=Path,
                        help='Directory for report output (default: ./reports_output)')
    report.add_argument('--no-charts',
                        action='store_true',
                        help='Skip chart rendering')
    report.add_argument('--quiet', '-q',
                        action='store_true',
                        help='Minimal output (just success/failure)')

    subparsers.add_parser('show-config', help='Print the resolved configuration')

    return parser


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else os.getenv('LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    overrides = {}
    if args.command == 'report':
        overrides = {
            'end_date': args.end,
            'lookback_days': args.lookback_days,
            'risk_free_annual': args.risk_free,
            'output_dir': args.output_dir,
        }
        if args.no_charts:
            overrides['include_charts'] = False

    try:
        config = load_config(args.config, **overrides)
    except SettingsError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.command == 'show-config':
        _show_config(config)
        return 0

    return generate_report(config, quiet=args.quiet)


def generate_report(config: RiskReportConfig, quiet: bool = False) -> int:
    """
    Run the pipeline and print a summary.

    Returns:
        Process exit code
    """
    if not quiet:
        print(f"Generating risk report for {', '.join(config.tickers)} vs {config.benchmark}")
        print(f"Date range: {config.start_date} to {config.end_date} ({config.lookback_days} days)")
        print()

    result = run_risk_report(config)

    if result['status'] != 'completed':
        print(f"ERROR: Report failed: {result['error_message']}", file=sys.stderr)
        return 1

    if quiet:
        print(result['report_path'])
        return 0

    print(f"Aligned observations: {result['observations']}")
    for message in result['data_quality_warnings']:
        print(f"WARNING: {message}")
    print()

    _display_statistics(result['statistics'])

    print(f"Report: {result['report_path']}")
    print(f"Metrics: {result['metrics_path']}")
    print(f"Duration: {result['duration_seconds']:.1f}s")
    return 0


def _display_statistics(statistics: dict) -> None:
    """Display a compact statistics table."""
    header = f"{'Ticker':<8}{'Beta':>9}{'Sharpe':>9}{'VaR':>10}{'t-stat':>9}{'p-value':>9}"
    print(header)
    print('-' * len(header))
    for ticker, stats in statistics.items():
        print(
            f"{ticker:<8}"
            f"{format_ratio(stats['beta']):>9}"
            f"{format_ratio(stats['sharpe_ratio']):>9}"
            f"{format_percentage(stats['var_95']):>10}"
            f"{format_ratio(stats['t_statistic']):>9}"
            f"{format_pvalue(stats['p_value']):>9}"
        )
    print()


def _show_config(config: RiskReportConfig) -> None:
    print(f"Tickers:          {', '.join(config.tickers)}")
    print(f"Benchmark:        {config.benchmark}")
    print(f"Window:           {config.start_date} to {config.end_date} ({config.lookback_days} days)")
    print(f"Risk-free (ann.): {config.risk_free_annual}")
    print(f"VaR confidence:   {config.var_confidence}")
    print(f"Test confidence:  {config.test_confidence}")
    print(f"Rolling window:   {config.rolling_window}")
    print(f"Output dir:       {config.output_dir}")
    print(f"Fetch:            timeout {config.fetch_timeout}s, {config.fetch_retries} retries")


if __name__ == '__main__':
    sys.exit(main())
