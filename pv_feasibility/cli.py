"""
PV Feasibility CLI

Runs one feasibility study from a measured bill and a stored solar yield
profile, prints the headline figures and optionally exports CSV files.

Usage:
    pv-feasibility --yield-csv data/yield_tunis.csv --category OFFICE_ADMIN_BANK \\
        --zone NORTH --month 7 --consumption 1200
    pv-feasibility --yield-csv data/yield_sfax.csv --category HOTEL --zone SOUTH \\
        --month 1 --bill-amount 850 --segment MT --operating-hours DAY
"""

import argparse
import logging
import math
import sys
from typing import List, Optional

import yaml

from pv_feasibility.config.simulation_config import SimulationConfig
from pv_feasibility.errors import FeasibilityError
from pv_feasibility.infrastructure.weather.solar_yield import SolarYieldProfile
from pv_feasibility.simulation.orchestrator import FeasibilityOrchestrator, SimulationRequest
from pv_feasibility.simulation.simulation_results import SimulationResult

EXIT_ERROR = 2


def _format_years(value: float) -> str:
    return "never" if math.isinf(value) else f"{value:.2f} years"


def print_summary(result: SimulationResult) -> None:
    """Print the headline figures of a simulation."""
    production = result.production
    summary = result.economics.summary

    print("\nPV Feasibility Summary")
    print("=" * 60)
    print(f"Annual consumption:   {result.consumption.annual_consumption_kwh:,.2f} kWh")
    print(f"Installed power:      {production.installed_power_kwp:.2f} kWp")
    print(f"Annual production:    {production.annual_pv_production_kwh:,.2f} kWh")
    print(f"Coverage:             {production.coverage_rate_percent:.2f} %")
    if result.autoconsumption is not None:
        auto = result.autoconsumption
        print(f"Self-consumption:     {auto.self_consumption_ratio:.0%} "
              f"(surplus {auto.surplus_fraction:.0%})")
    print(f"CAPEX:                {summary.capex:,.2f}")
    print(f"NPV:                  {summary.npv:,.2f}")
    print(f"IRR:                  {summary.irr_percent:.2f} %")
    print(f"ROI:                  {summary.roi_percent:.2f} %")
    print(f"Simple payback:       {_format_years(summary.simple_payback_years)}")
    print(f"Discounted payback:   {_format_years(summary.discounted_payback_years)}")
    print(f"CO2 avoided:          {summary.total_co2_avoided_tonnes:,.2f} t")
    print("=" * 60)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pv-feasibility",
        description="PV feasibility study from a single monthly bill",
    )
    parser.add_argument('--config', help='Simulation configuration YAML (default: built-in defaults)')
    parser.add_argument('--yield-csv', required=True,
                        help='Monthly specific yield CSV (columns: month, yield_kwh_per_kwp)')
    parser.add_argument('--category', required=True, help='Building category name or label')
    parser.add_argument('--zone', required=True, help='Climate zone (NORTH, CENTER, SOUTH)')
    parser.add_argument('--month', required=True, type=int, help='Month of the measured bill (1-12)')

    measured = parser.add_mutually_exclusive_group(required=True)
    measured.add_argument('--consumption', type=float, help='Measured consumption [kWh]')
    measured.add_argument('--bill-amount', type=float, help='Measured bill amount')

    parser.add_argument('--segment', default='BT', help='Tariff segment: BT or MT (default: BT)')
    parser.add_argument('--operating-hours', help='Operating hours case: DAY, DAY_EVENING, CONTINUOUS')
    parser.add_argument('--output-dir', help='Write CSV results to this directory (default: output_dir from --config)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
        config.validate()

        request = SimulationRequest(
            building_category=args.category,
            climate_zone=args.zone,
            reference_month=args.month,
            measured_consumption_kwh=args.consumption,
            measured_bill_amount=args.bill_amount,
            tariff_segment=args.segment,
            operating_hours=args.operating_hours,
        )
        solar_yield = SolarYieldProfile.from_csv(args.yield_csv)

        result = FeasibilityOrchestrator(config).run(request, solar_yield)
    except (FeasibilityError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    print_summary(result)

    output_dir = args.output_dir or config.output_dir
    if output_dir:
        result.to_csv(output_dir)
        print(f"\nResults written to {output_dir}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
