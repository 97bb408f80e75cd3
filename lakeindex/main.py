#!/usr/bin/env python3
"""
Covering Index Walkthrough

This example demonstrates the full lifecycle of a covering index:
- Writing source datasets (customers and orders)
- Creating an index with indexed and included columns
- Comparing plans with and without indexes (explain)
- Running a query with rewriting enabled and disabled
- Detecting a stale index after the source changes and refreshing it
- Soft delete, restore and vacuum

Run with: python -m lakeindex.main
"""

import tempfile
from typing import Optional
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text
from rich.tree import Tree
from rich import box

from . import (
    FieldType, IndexConfig, LakeIndexConfig, DisplayMode, Schema, Workspace,
    Filter, Join, Project, PlanNode, eq,
)


console = Console()


def print_header(title: str, subtitle: str = ""):
    """Print a header panel"""
    if subtitle:
        full_title = f"[bold blue]{title}[/bold blue]\n[dim]{subtitle}[/dim]"
    else:
        full_title = f"[bold blue]{title}[/bold blue]"

    console.print(Panel(full_title, style="bright_blue", box=box.DOUBLE, padding=(1, 2)))


def print_step(step_num: int, title: str, description: str = ""):
    step_text = f"[bold yellow]Step {step_num}: {title}[/bold yellow]"
    if description:
        step_text += f"\n[dim italic]{description}[/dim italic]"
    console.print(step_text)
    console.print()


def print_success(message: str):
    console.print(f"[bold green]✓[/bold green] {message}")


def print_info(message: str):
    console.print(f"[bold cyan]ℹ[/bold cyan] {message}")


def rows_table(title: str, schema: Schema, rows: list[tuple]) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    for name in schema.field_names:
        table.add_column(name, style="green")
    for row in rows:
        table.add_row(*(str(value) for value in row))
    return table


def plan_tree(plan: PlanNode, tree: Optional[Tree] = None) -> Tree:
    """Render a plan as a rich tree, index scans highlighted."""
    style = "bold green" if plan.operator_name() in ("IndexScan", "SortMergeJoin") else ""
    label = Text(plan.describe(), style=style)
    node = Tree(label, guide_style="dim") if tree is None else tree.add(label)
    for child in plan.children():
        plan_tree(child, node)
    return node


CUSTOMERS = Schema.of(
    ("CustomerId", FieldType.INT),
    ("Name", FieldType.STRING),
    ("City", FieldType.STRING),
)

ORDERS = Schema.of(
    ("OrderId", FieldType.INT),
    ("CustomerId", FieldType.INT),
    ("TotalAmount", FieldType.DOUBLE),
    ("Status", FieldType.STRING),
)


def main():
    print_header("Covering Index Walkthrough",
                 "Build, use, explain and retire an index over a data lake dataset")

    with tempfile.TemporaryDirectory() as root:
        root = Path(root)
        config = LakeIndexConfig(system_path=str(root / "indexes"),
                                 catalog_dir=str(root / "catalog"),
                                 display_mode=DisplayMode.CONSOLE)

        with Workspace(config) as ws:
            print_step(1, "Write source datasets")
            ws.write_dataset(str(root / "data" / "customers"), CUSTOMERS, [
                (101, "Avery", "Lisbon"),
                (203, "Blake", "Oslo"),
                (305, "Casey", "Lima"),
            ])
            orders = ws.write_dataset(str(root / "data" / "orders"), ORDERS, [
                (1, 203, 42.5, "shipped"),
                (2, 101, 17.0, "pending"),
                (3, 203, 99.9, "shipped"),
                (4, 305, 12.25, "cancelled"),
            ])
            print_success(f"Wrote {orders.name} with fingerprint {orders.fingerprint[:12]}")
            console.print()

            print_step(2, "Create a covering index",
                       "Indexed on CustomerId, carrying TotalAmount along")
            ws.create_index(orders, IndexConfig("orders_by_customer",
                                                ["CustomerId"], ["TotalAmount"]))
            console.print(ws.indexes_table())
            console.print()

            print_step(3, "Explain a lookup")
            plan = Project(("TotalAmount",),
                           Filter(eq("CustomerId", 203), ws.scan(str(root / "data" / "orders"))))
            ws.explain(plan, verbose=True, sink=print)

            print_step(4, "Run the query with and without the index")
            without = ws.execute(plan)
            ws.enable()
            with_index = ws.execute(plan)
            console.print(rows_table("Indexes disabled", plan.output_schema(), without))
            console.print(rows_table("Indexes enabled", plan.output_schema(), with_index))
            print_success("Both runs return the same rows" if sorted(without) == sorted(with_index)
                          else "Results differ!")
            console.print()

            print_step(5, "Join customers and orders")
            join = Join(ws.scan(str(root / "data" / "orders")),
                        ws.scan(str(root / "data" / "customers")),
                        ("CustomerId",), ("CustomerId",))
            ws.create_index(ws.read(str(root / "data" / "customers")),
                            IndexConfig("customers_by_id", ["CustomerId"], ["Name"]))
            query = Project(("Name", "TotalAmount"), join)
            console.print(plan_tree(ws.rewrite(query)))
            console.print(rows_table("Orders with customer names", query.output_schema(),
                                     sorted(ws.execute(query))))
            console.print()

            print_step(6, "Change the source", "New orders make the index stale")
            ws.append(str(root / "data" / "orders"), [(5, 101, 7.5, "pending")])
            print_info(f"Stale indexes: {ws.check_staleness()}")
            ws.refresh_index("orders_by_customer")
            console.print(ws.indexes_table())
            console.print()

            print_step(7, "Delete, restore and vacuum")
            ws.delete_index("customers_by_id")
            ws.restore_index("customers_by_id")
            ws.delete_index("customers_by_id")
            ws.vacuum_index("customers_by_id")
            console.print(ws.indexes_table())
            console.print()

            console.print(Rule("[bold green]Walkthrough Complete![/bold green]"))
            info = ws.get_system_info()
            print_info(f"Indexes by state: {info['catalog']['by_state']}")


if __name__ == "__main__":
    main()
