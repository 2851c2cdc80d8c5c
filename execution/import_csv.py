"""Standalone CSV import script: load inventory parts from command line."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from autofix.app import configure_logging, open_store
from autofix.io.csv_handler import import_inventory_csv


def main():
    if len(sys.argv) < 2:
        print("Usage: python import_csv.py <filepath.csv> [--update]")
        sys.exit(1)

    filepath = sys.argv[1]
    update = "--update" in sys.argv

    configure_logging()
    store = open_store()

    print(f"Importing from: {filepath}")
    if update:
        print("Mode: Update stock and thresholds of existing parts")

    results = import_inventory_csv(store, filepath, update_existing=update)

    print("\nResults:")
    print(f"  Imported: {results['imported']}")
    print(f"  Updated:  {results['updated']}")
    print(f"  Skipped:  {results['skipped']}")

    if results["errors"]:
        print(f"\nErrors ({len(results['errors'])}):")
        for err in results["errors"]:
            print(f"  - {err}")


if __name__ == "__main__":
    main()
