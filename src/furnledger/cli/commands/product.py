"""Product and product category commands."""

import click

from furnledger.cli.error_handling import handle_domain_error
from furnledger.cli.resolution import resolve_or_exit
from furnledger.domain.errors import DomainError
from furnledger.domain.product import ProductService
from furnledger.utils.amount_parser import parse_amount
from furnledger.utils.resolvers import resolve_product_category


@click.group()
def product_group():
    """Manage products and product categories."""
    pass


@product_group.command("category-create")
@click.argument("name")
@click.pass_context
def create_category(ctx, name: str):
    """Create a product category."""
    service = ProductService(ctx.obj["db"])

    try:
        category_id = service.create_category(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created product category '{name}' (ID: {category_id})")


@product_group.command("categories")
@click.pass_context
def list_categories(ctx):
    """List product categories."""
    service = ProductService(ctx.obj["db"])

    categories = service.list_categories()
    if not categories:
        click.echo("No product categories found.")
        return

    click.echo("\nProduct categories:")
    for category in categories:
        click.echo(f"ID: {category.id:3d} | {category.name}")


@product_group.command("create")
@click.argument("name")
@click.option("--category", help="Category name or ID")
@click.option("--price", "sales_price", default="0", help="Sales price (default: 0)")
@click.option("--cost", "purchase_price", default="0", help="Purchase price (default: 0)")
@click.pass_context
def create_product(ctx, name: str, category: str | None, sales_price: str, purchase_price: str):
    """Create a product.

    Examples:
        furnledger product create "3-Seater Sofa" --category "Living Room" --price 45000
    """
    service = ProductService(ctx.obj["db"])
    category_id = resolve_or_exit(ctx, resolve_product_category, service, category)

    try:
        product_id = service.create_product(
            name=name,
            category_id=category_id,
            sales_price=parse_amount(sales_price),
            purchase_price=parse_amount(purchase_price),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created product '{name}' (ID: {product_id})")


@product_group.command("list")
@click.option("--category", help="Only products in this category (name or ID)")
@click.pass_context
def list_products(ctx, category: str | None):
    """List products."""
    service = ProductService(ctx.obj["db"])
    category_id = resolve_or_exit(ctx, resolve_product_category, service, category)

    products = service.list_products(category_id=category_id)
    if not products:
        click.echo("No products found.")
        return

    category_names = {c.id: c.name for c in service.list_categories()}
    click.echo("\nProducts:")
    click.echo("-" * 70)
    for p in products:
        category_name = category_names.get(p.category_id, "-")
        click.echo(f"ID: {p.id:3d} | {p.name:25s} | {category_name:15s} | {p.sales_price:>12,.2f}")


def register_commands(cli):
    """Register product commands with main CLI."""
    cli.add_command(product_group, name="product")
