"""Standalone CSV export script: export inventory or jobs from command line."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from autofix.app import open_store
from autofix.io.csv_handler import export_inventory_csv, export_jobs_csv


def main():
    if len(sys.argv) < 3:
        print("Usage: python export_csv.py <inventory|jobs> <output.csv>")
        sys.exit(1)

    data_type = sys.argv[1].lower()
    filepath = sys.argv[2]

    store = open_store()

    if data_type == "inventory":
        count = export_inventory_csv(store, filepath)
    elif data_type == "jobs":
        count = export_jobs_csv(store, filepath)
    else:
        print(f"Unknown data type: {data_type}. Use 'inventory' or 'jobs'.")
        sys.exit(1)

    print(f"Exported {count} {data_type} rows to {filepath}")


if __name__ == "__main__":
    main()
