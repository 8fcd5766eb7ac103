"""Storefront database management CLI.

Creates and drops the schema for every storefront context, and seeds a few
products for local experiments.

Usage:
    python src/manage.py setup-db     # Create all tables
    python src/manage.py drop-db      # Drop all tables
    python src/manage.py seed --products 10
"""

import argparse
import sys
from decimal import Decimal


def setup_database():
    from app import bootstrap

    print("Initializing storefront domain...")
    bootstrap(create_schema=True)
    print("Done.")


def drop_database():
    from app import bootstrap
    from shared.database import drop_db

    print("Initializing storefront domain...")
    storefront = bootstrap()
    print("Dropping storefront database schema...")
    drop_db(storefront)
    print("Done.")


def seed_products(count):
    from protean import UnitOfWork

    from app import bootstrap
    from catalogue.product.product import Product

    storefront = bootstrap(create_schema=True)
    with storefront.domain_context(), UnitOfWork():
        repo = storefront.repository_for(Product)
        for number in range(1, count + 1):
            repo.add(
                Product.create(
                    name=f"Sample product {number}",
                    price=Decimal("9.99") * number,
                    stock_quantity=10 * number,
                )
            )
    print(f"Seeded {count} products.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed", help="Insert sample products")
    seed_parser.add_argument("--products", type=int, default=5, help="Number of products to insert")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed_products(args.products)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
