import time
from typing import Iterable, Optional

from rich import box
from rich.table import Table

from .catalog import IndexCatalog, IndexConfig, IndexEntry, IndexState
from .config import DisplayMode, LakeIndexConfig
from .core.schema import Schema
from .explain import ExplainReporter
from .explain.reporter import Sink
from .index import IndexBuilder, IndexManager
from .query import PlanExecutor, PlanNode, PlanRewriter, Scan
from .session import IndexingSession
from .storage import Dataset, DatasetStore


class Workspace:
    """
    Entry point tying every component together.

    This class owns one instance of each component and exposes the
    operations callers need:

    1. **Datasets**: write, append and open source data
    2. **Index admin**: create, delete, restore, vacuum, refresh
    3. **Planning**: enable/disable rewriting, rewrite and execute plans
    4. **Explain**: compare a plan with and without indexes

    Architecture:
    ```
    Workspace
    ├── DatasetStore   (dataset files + read cache)
    ├── IndexCatalog   (index metadata)
    ├── IndexManager   (lifecycle, wraps IndexBuilder)
    ├── IndexingSession (enable flag + display mode)
    ├── PlanRewriter   (covering index substitution)
    ├── PlanExecutor   (runs plans)
    └── ExplainReporter
    ```

    Usage:
        with Workspace(LakeIndexConfig(system_path="idx", catalog_dir="cat")) as ws:
            orders = ws.read("data/orders")
            ws.create_index(orders, IndexConfig("orders_by_customer", ["CustomerId"]))
    """

    def __init__(self, config: Optional[LakeIndexConfig] = None):
        self.config = config or LakeIndexConfig()

        self.store = DatasetStore(self.config.cache_size)
        self.catalog = IndexCatalog(self.config.catalog_dir)
        self.builder = IndexBuilder(self.catalog, self.store, self.config.system_path)
        self.manager = IndexManager(self.catalog, self.store, self.builder)

        self.session = IndexingSession(self.config.enabled, self.config.display_mode)
        self.rewriter = PlanRewriter(self.catalog)
        self.executor = PlanExecutor(self.store)
        self.reporter = ExplainReporter(self.rewriter)

        self._started_at = time.time()
        self._closed = False

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------

    def write_dataset(self, path: str, schema: Schema, rows: Iterable[tuple],
                      sort_order: tuple[str, ...] = (), overwrite: bool = False) -> Dataset:
        return self.store.write(path, schema, rows, sort_order, overwrite)

    def append(self, path: str, rows: Iterable[tuple]) -> Dataset:
        return self.store.append(path, rows)

    def read(self, path: str) -> Dataset:
        return self.store.open(path)

    def scan(self, path: str) -> Scan:
        """Plan leaf over the current version of a dataset."""
        return Scan.of(self.store.open(path))

    # ------------------------------------------------------------------
    # Index admin
    # ------------------------------------------------------------------

    def create_index(self, dataset: Dataset, config: IndexConfig) -> IndexEntry:
        return self.manager.create_index(dataset, config)

    def delete_index(self, name: str) -> IndexEntry:
        return self.manager.delete_index(name)

    def restore_index(self, name: str) -> IndexEntry:
        return self.manager.restore_index(name)

    def vacuum_index(self, name: str) -> IndexEntry:
        return self.manager.vacuum_index(name)

    def refresh_index(self, name: str) -> IndexEntry:
        return self.manager.refresh_index(name)

    def check_staleness(self) -> list[str]:
        return self.manager.check_staleness()

    def indexes(self) -> list[dict]:
        return self.manager.indexes()

    def indexes_table(self) -> Table:
        """Index listing as a rich table."""
        table = Table(title="Indexes", box=box.ROUNDED, header_style="bold cyan")
        for column in ("Name", "Indexed", "Included", "State", "Rows", "Location"):
            table.add_column(column)

        styles = {IndexState.ACTIVE.value: "green",
                  IndexState.STALE.value: "yellow",
                  IndexState.DELETED.value: "red"}
        for summary in self.indexes():
            table.add_row(
                summary["name"],
                ", ".join(summary["indexed_columns"]),
                ", ".join(summary["included_columns"]),
                f"[{styles[summary['state']]}]{summary['state']}[/]",
                str(summary["row_count"]),
                summary["storage_location"],
            )
        return table

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def enable(self) -> None:
        self.session.enable()

    def disable(self) -> None:
        self.session.disable()

    def is_enabled(self) -> bool:
        return self.session.is_enabled()

    def set_display_mode(self, display_mode: DisplayMode) -> None:
        self.session.set_display_mode(display_mode)

    def rewrite(self, plan: PlanNode) -> PlanNode:
        """Rewrite a plan under the current session settings."""
        return self.rewriter.rewrite(plan, self.session.snapshot())

    def execute(self, plan: PlanNode) -> list[tuple]:
        """Rewrite (when enabled) and run a plan."""
        return self.executor.execute(self.rewrite(plan))

    def explain(self, plan: PlanNode, verbose: bool = False,
                sink: Optional[Sink] = None) -> str:
        settings = self.session.snapshot()
        return self.reporter.explain(plan, verbose, sink, settings.display_mode)

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------

    def get_system_info(self) -> dict:
        """
        Get system information for monitoring.

        Returns:
            Dictionary describing the session, catalog and read cache
        """
        settings = self.session.snapshot()
        states = {state.value: 0 for state in IndexState}
        for entry in self.catalog.list_entries():
            states[entry.state.value] += 1

        return {
            'system_status': 'closed' if self._closed else 'running',
            'uptime_seconds': time.time() - self._started_at,
            'session': {
                'enabled': settings.enabled,
                'display_mode': settings.display_mode.value,
            },
            'catalog': {
                'total_indexes': len(self.catalog),
                'by_state': states,
            },
            'store': dict(self.store.stats.__dict__),
            'system_path': str(self.builder.system_path),
        }

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.store.clear_cache()

    def __enter__(self) -> 'Workspace':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __str__(self) -> str:
        return f"Workspace({self.catalog}, {self.session})"

    def __repr__(self) -> str:
        return self.__str__()
