import io
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import DisplayMode
from ..query import PlanNode, PlanRewriter
from ..session import RewriteSettings


Sink = Union[Callable[[str], object], io.TextIOBase]

BAR = "=" * 61


@dataclass
class OperatorStat:
    operator: str
    without_indexes: int
    with_indexes: int

    @property
    def difference(self) -> int:
        return self.with_indexes - self.without_indexes


@dataclass
class ExplainReport:
    """📋 Everything explain shows, independent of how it is rendered."""

    """🌳 Rewritten plan, one entry per tree line"""
    with_indexes: list[str]

    """🌳 Original plan, one entry per tree line"""
    without_indexes: list[str]

    """🏷️ (index name, storage location) for every index the rewritten plan reads"""
    indexes_used: list[tuple[str, str]] = field(default_factory=list)

    """📊 Physical operator counts, ordered by operator name"""
    operator_stats: list[OperatorStat] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.with_indexes != self.without_indexes

    def highlighted_with(self) -> list[bool]:
        """Per line of the rewritten plan: is it absent from the original plan?"""
        original = {line.strip(" +-:") for line in self.without_indexes}
        return [line.strip(" +-:") not in original for line in self.with_indexes]

    def highlighted_without(self) -> list[bool]:
        """Per line of the original plan: is it absent from the rewritten plan?"""
        rewritten = {line.strip(" +-:") for line in self.with_indexes}
        return [line.strip(" +-:") not in rewritten for line in self.without_indexes]


class ExplainReporter:
    """
    Side-by-side comparison of a plan with and without index rewriting.

    The report always compares the two alternatives, whatever the session
    toggle says, so it answers "what would indexes do for this query".
    Nothing is mutated; the output goes to the injected sink.

    Display modes:
    - ``PLAIN_TEXT``: Hyperspace-style text, changed lines wrapped in
      ``<----`` / ``---->``
    - ``CONSOLE``: rich panels with ANSI styling
    - ``HTML``: the same panels exported as a standalone HTML document
    """

    def __init__(self, rewriter: PlanRewriter, width: int = 120):
        self.rewriter = rewriter
        self.width = width

    def build_report(self, plan: PlanNode, verbose: bool = False) -> ExplainReport:
        enabled = RewriteSettings(enabled=True)
        rewritten = self.rewriter.rewrite(plan, enabled)

        used = []
        for scan in rewritten.scans():
            if scan.is_index_scan and (scan.index_name, scan.path) not in used:
                used.append((scan.index_name, scan.path))

        report = ExplainReport(
            with_indexes=rewritten.tree_lines(),
            without_indexes=plan.tree_lines(),
            indexes_used=sorted(used),
        )
        if verbose:
            report.operator_stats = self._operator_stats(plan, rewritten)
        return report

    def explain(self, plan: PlanNode, verbose: bool = False,
                sink: Optional[Sink] = None,
                display_mode: DisplayMode = DisplayMode.PLAIN_TEXT) -> str:
        """
        Render the comparison and write it to the sink.

        Args:
            plan: Plan over source datasets
            verbose: Also include physical operator statistics
            sink: Callable taking a string, or a writable text stream;
                defaults to ``print``
            display_mode: Rendering format

        Returns:
            The rendered text that was written
        """
        report = self.build_report(plan, verbose)
        if display_mode == DisplayMode.PLAIN_TEXT:
            rendered = self.render_plain(report, verbose)
        else:
            rendered = self.render_rich(report, verbose, html=display_mode == DisplayMode.HTML)

        sink = print if sink is None else sink
        if hasattr(sink, "write"):
            sink.write(rendered)
        else:
            sink(rendered)
        return rendered

    def render_plain(self, report: ExplainReport, verbose: bool) -> str:
        lines = [BAR, "Plan with indexes:", BAR]
        for line, changed in zip(report.with_indexes, report.highlighted_with()):
            lines.append(f"<----{line}---->" if changed else line)
        lines.append("")

        lines += [BAR, "Plan without indexes:", BAR]
        for line, changed in zip(report.without_indexes, report.highlighted_without()):
            lines.append(f"<----{line}---->" if changed else line)
        lines.append("")

        lines += [BAR, "Indexes used:", BAR]
        lines += [f"{name}:{location}" for name, location in report.indexes_used]
        lines.append("")

        if verbose:
            lines += [BAR, "Physical operator stats:", BAR]
            lines.append(self._plain_stats_table(report.operator_stats))
            lines.append("")
        return "\n".join(lines)

    def render_rich(self, report: ExplainReport, verbose: bool, html: bool = False) -> str:
        console = Console(record=True, file=io.StringIO(), width=self.width,
                          force_terminal=not html, color_system="truecolor")

        console.print(Panel(self._plan_text(report.with_indexes, report.highlighted_with()),
                            title="Plan with indexes", title_align="left",
                            style="bright_blue", box=box.ROUNDED))
        console.print(Panel(self._plan_text(report.without_indexes, report.highlighted_without()),
                            title="Plan without indexes", title_align="left",
                            style="white", box=box.ROUNDED))

        used = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
        used.add_column("Index")
        used.add_column("Location")
        for name, location in report.indexes_used:
            used.add_row(name, location)
        console.print(Panel(used if report.indexes_used else Text("(none)", style="dim"),
                            title="Indexes used", title_align="left", box=box.ROUNDED))

        if verbose:
            console.print(Panel(self._rich_stats_table(report.operator_stats),
                                title="Physical operator stats", title_align="left",
                                box=box.ROUNDED))

        if html:
            return console.export_html(inline_styles=True)
        return console.export_text(styles=True)

    @staticmethod
    def _operator_stats(original: PlanNode, rewritten: PlanNode) -> list[OperatorStat]:
        before = Counter(node.operator_name() for node in original.walk())
        after = Counter(node.operator_name() for node in rewritten.walk())
        return [OperatorStat(op, before.get(op, 0), after.get(op, 0))
                for op in sorted(set(before) | set(after))]

    @staticmethod
    def _plan_text(lines: list[str], highlights: list[bool]) -> Group:
        rendered = []
        for line, changed in zip(lines, highlights):
            rendered.append(Text(line, style="bold green" if changed else ""))
        return Group(*rendered)

    @staticmethod
    def _plain_stats_table(stats: list[OperatorStat]) -> str:
        header = ("Physical Operator", "Indexes Disabled", "Indexes Enabled", "Difference")
        rows = [(s.operator, str(s.without_indexes), str(s.with_indexes), str(s.difference))
                for s in stats]
        widths = [max(len(r[i]) for r in [header] + rows) for i in range(len(header))]

        def fmt(row):
            return "| " + " | ".join(cell.ljust(w) for cell, w in zip(row, widths)) + " |"

        border = "+-" + "-+-".join("-" * w for w in widths) + "-+"
        return "\n".join([border, fmt(header), border] + [fmt(r) for r in rows] + [border])

    @staticmethod
    def _rich_stats_table(stats: list[OperatorStat]) -> Table:
        table = Table(box=box.SIMPLE_HEAVY, header_style="bold magenta")
        table.add_column("Physical Operator")
        table.add_column("Indexes Disabled", justify="right")
        table.add_column("Indexes Enabled", justify="right")
        table.add_column("Difference", justify="right")
        for stat in stats:
            style = "green" if stat.difference else ""
            table.add_row(stat.operator, str(stat.without_indexes),
                          str(stat.with_indexes), f"{stat.difference:+d}", style=style)
        return table
