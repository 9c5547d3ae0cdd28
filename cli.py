# cli.py
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.products import ProductsClient, ProductsApiError

console = Console()
c = ProductsClient(base_url=os.getenv("PRODUCTS_API_URL", "http://127.0.0.1:3000"))


# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
category_cache = set()

# Custom prompt style for prompt_toolkit
custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], title: str = "📦 Products Catalog"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Description", width=36)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=14)
    table.add_column("Stock", width=8)

    for p in products:
        in_stock = p.get("inStock", False)
        table.add_row(
            p.get("id", "N/A"),
            p.get("name", "N/A"),
            p.get("description", ""),
            f"${p.get('price', 0):.2f}",
            p.get("category", "N/A"),
            "[green]yes[/green]" if in_stock else "[red]no[/red]",
        )
    console.print(table)


def show_page(page: Dict[str, Any]):
    show_products(page.get("data", []))
    console.print(
        f"[dim]Page {page.get('page')} of {page.get('totalPages')} "
        f"({page.get('totalProducts')} matching, {page.get('limit')} per page)[/dim]"
    )


def show_stats(stats: Dict[str, Any]):
    table = Table(box=box.ROUNDED, header_style="bold yellow", show_lines=True)
    table.add_column("Category", style="bold", width=20)
    table.add_column("Products", justify="right", width=10)
    for category, count in stats.get("countByCategory", {}).items():
        table.add_row(category, str(count))

    summary = (
        f"Total products: [bold]{stats.get('totalProducts', 0)}[/bold]\n"
        f"Categories: [bold]{stats.get('totalCategories', 0)}[/bold]\n"
        f"In stock: [green]{stats.get('totalInStock', 0)}[/green]  "
        f"Out of stock: [red]{stats.get('totalOutOfStock', 0)}[/red]\n"
        f"Average price: [bold]${stats.get('averagePrice', 0):.2f}[/bold]"
    )
    console.print(Panel.fit(summary, title="📊 Catalogue Stats", border_style="yellow"))
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper with error display
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the result, or None after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except ProductsApiError as e:
        status_message = f"Error: {e.message}"
        detail = "\n".join(f"- {err}" for err in e.errors)
        console.print(show_status(f"Error ({e.status_code}): {e.message}" + (f"\n{detail}" if detail else ""), False))
        return None
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_cache():
    global product_cache
    page = try_api(c.list_products, limit=1000) or {}
    product_cache = page.get("data", [])
    for p in product_cache:
        category_cache.add(p.get("category", ""))


def get_product_completer():
    if not product_cache:
        refresh_cache()
    ids = [p.get("id", "") for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_category_completer():
    return WordCompleter(sorted(cat for cat in category_cache if cat), ignore_case=True)


# ---------------------------
# Input helpers
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Products API",
        "[bold blue]Catalogue CLI with Autocomplete[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message

    console.clear()
    console.print(create_header())
    refresh_cache()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "5", "➕ Create product"),
            ("2", "🔍 Search products", "6", "✏️ Update product"),
            ("3", "📊 Stats", "7", "🗑️ Delete product"),
            ("4", "ℹ️ Get product by ID", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 8)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            category = prompt_with_autocomplete("🏷️ Category (blank for all)", completer=get_category_completer()).strip()
            page = IntPrompt.ask("Page", default=1)
            limit = IntPrompt.ask("Per page", default=10)
            resp = try_api(c.list_products, category or None, page, limit, success_msg="Products loaded successfully")
            if resp is not None:
                show_page(resp)

        elif choice == "2":
            term = prompt_with_autocomplete("Enter search term")
            res = try_api(c.search_products, term, success_msg=f"Search for '{term}' completed")
            if res is not None:
                show_products(res, title=f"🔍 Results for '{term}'")

        elif choice == "3":
            resp = try_api(c.get_stats, success_msg="Stats loaded")
            if resp:
                show_stats(resp)

        elif choice == "4":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            resp = try_api(c.get_product, pid, success_msg=f"Product {pid} details loaded")
            if resp:
                show_products([resp])

        elif choice == "5":
            name = prompt_with_autocomplete("Enter product name")
            description = prompt_with_autocomplete("Enter description")
            price = ask_float("💰 Price", default=10.0)
            category = prompt_with_autocomplete("🏷️ Category", completer=get_category_completer())
            in_stock = Confirm.ask("In stock?", default=True)
            resp = try_api(
                c.create_product, name, description, price, category, in_stock,
                success_msg=f"Product '{name}' created successfully"
            )
            if resp:
                show_products([resp])
                refresh_cache()

        elif choice == "6":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            console.print("[dim]Leave a field blank to keep its current value.[/dim]")
            fields: Dict[str, Any] = {}
            name = prompt_with_autocomplete("New name").strip()
            if name:
                fields["name"] = name
            description = prompt_with_autocomplete("New description").strip()
            if description:
                fields["description"] = description
            price = Prompt.ask("New price", default="").strip()
            if price:
                try:
                    fields["price"] = float(price)
                except ValueError:
                    console.print("[red]Ignoring price: not a number.[/red]")
            category = prompt_with_autocomplete("New category", completer=get_category_completer()).strip()
            if category:
                fields["category"] = category
            stock = Prompt.ask("In stock? (y/n, blank to keep)", default="").strip().lower()
            if stock in ("y", "n"):
                fields["in_stock"] = stock == "y"
            resp = try_api(c.update_product, pid, success_msg=f"Product {pid} updated", **fields)
            if resp:
                show_products([resp])
                refresh_cache()

        elif choice == "7":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            if Confirm.ask(f"[red]Delete product {pid}?[/red]"):
                try_api(c.delete_product, pid, success_msg=f"Product {pid} deleted")
                refresh_cache()

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thank you for using the Products API! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n\n[bold red]Unexpected error: {e}[/bold red]")
        sys.exit(1)
