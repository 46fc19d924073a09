"""
Sales Dataset Generator
Writes a synthetic online_sales_dataset.csv in the raw export format.

Usage:
    python scripts/generate_dataset.py --rows 50000 --output data/online_sales_dataset.csv
"""

import argparse
from pathlib import Path

from salesdash.data import SalesDatasetGenerator, write_sales_csv

DEFAULT_OUTPUT = Path(__file__).parent.parent / "data" / "online_sales_dataset.csv"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic sales dataset")
    parser.add_argument("--rows", type=int, default=50000, help="Number of rows (default: 50000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--start-year", type=int, default=2020)
    parser.add_argument("--end-year", type=int, default=2025)
    parser.add_argument("--malformed-rate", type=float, default=0.001, help="Share of unparseable dates")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT)
    args = parser.parse_args()

    print("=" * 60)
    print("🛒 Sales Dataset Generator")
    print("=" * 60 + "\n")

    print(f"📊 Generating {args.rows:,} sales rows...")
    generator = SalesDatasetGenerator(
        seed=args.seed,
        start_year=args.start_year,
        end_year=args.end_year,
        malformed_date_rate=args.malformed_rate,
    )
    df = generator.generate(args.rows)
    path = write_sales_csv(df, args.output)

    size = path.stat().st_size / 1024 / 1024
    print(f"   ✅ {path.name}: {len(df):,} rows ({size:.2f} MB)")
    print(f"\n📁 Output: {path}\n")


if __name__ == "__main__":
    main()
