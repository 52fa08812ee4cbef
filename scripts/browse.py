"""
Script to list the shop catalog and the locally persisted cart
Usage: python scripts/browse.py [--q chocolate] [--category Cakes] [--cart]
"""
import argparse
import asyncio
from pathlib import Path

from dotenv import load_dotenv

# Load .env before storefront reads LOG_LEVEL and settings at import time
ENV_PATH = Path(__file__).parent.parent / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)

from storefront.api import StorefrontAPI
from storefront.cart import CartModel, build_cart_store
from storefront.config import get_settings
from storefront.errors import CatalogError
from storefront.services.money import format_money


async def list_catalog(args: argparse.Namespace) -> bool:
    """Print catalog search results."""
    settings = get_settings()
    print(f"🔍 Catalog at {settings.api_url}\n")

    async with StorefrontAPI() as api:
        try:
            products = await api.search_products(
                q=args.q, category=args.category, min_price=args.min_price, max_price=args.max_price
            )
        except CatalogError as e:
            print(f"❌ Failed to load products: {e}")
            return False

    if not products:
        print("No products found for your search.")
        return True

    for product in products:
        stock = "∞" if product.quantity is None else product.quantity
        print(
            f"  {product.id:<26} {product.name:<30} {product.category or 'Other':<14} "
            f"{format_money(product.price, settings.currency):>12}  stock: {stock}"
        )
    print(f"\n✅ {len(products)} product(s)")
    return True


def show_cart() -> None:
    """Print the cart persisted in the configured slot."""
    settings = get_settings()
    cart = CartModel(build_cart_store(settings))

    print("🛒 Your cart\n")
    if not cart:
        print("Your cart is empty.")
        return

    for line in cart.lines:
        print(
            f"  {line.name:<30} {line.quantity:>5} × {format_money(line.unit_price, settings.currency):>10}"
            f" = {format_money(line.total_price, settings.currency):>12}"
        )
    print(f"\nItems: {cart.total_items()}   Subtotal: {format_money(cart.subtotal(), settings.currency)}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Browse the storefront catalog")
    parser.add_argument("--q", help="search text")
    parser.add_argument("--category")
    parser.add_argument("--min-price", type=float)
    parser.add_argument("--max-price", type=float)
    parser.add_argument("--cart", action="store_true", help="show the persisted cart instead")
    args = parser.parse_args()

    if args.cart:
        show_cart()
        return 0
    return 0 if asyncio.run(list_catalog(args)) else 1


if __name__ == "__main__":
    raise SystemExit(main())
