"""Trinkets database management CLI.

Provides commands to create and drop the storefront database schema and to
load the sample jewelry catalogue.

Usage:
    python src/manage.py setup-db        # Create all tables
    python src/manage.py drop-db         # Drop all tables
    python src/manage.py seed-catalogue  # Load the sample products
"""

import argparse
import sys


def setup_database():
    """Create the storefront database schema."""
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    setup_db(storefront)
    print("Done.")


def drop_database():
    """Drop the storefront database schema."""
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    drop_db(storefront)
    print("Done.")


def seed_catalogue():
    """Load the sample jewelry catalogue, skipping products that already exist."""
    from storefront.catalogue.seed import seed_catalogue as seed
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    with storefront.domain_context():
        created = seed()
    print(f"Added {len(created)} products.")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Trinkets database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed-catalogue", help="Load the sample jewelry catalogue")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-catalogue":
        seed_catalogue()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
