"""Command-line interface for browsing the PETadex catalog."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List, Sequence

from rich.console import Console
from rich.table import Table

from petadex.core.database import Database
from petadex.core.errors import NotFoundError, ValidationError
from petadex.core.query import EnzymeFilter, PageRequest
from petadex.core.schemas import dump_rows
from petadex.core.settings import get_settings
from petadex.services import PlateAggregator, SequenceCatalog, TaxonomyService
from petadex.utils.logger import configure_logging

console = Console()


def _render(rows: List[Dict[str, Any]], title: str, as_json: bool) -> None:
    if as_json:
        console.print_json(data=rows)
        return
    if not rows:
        console.print(f"[yellow]{title}: no rows[/yellow]")
        return
    table = Table(title=title, header_style="bold cyan")
    columns = list(rows[0].keys())
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("" if row[c] is None else str(row[c]) for c in columns))
    console.print(table)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query the PETadex enzyme catalog")
    parser.add_argument("--db", type=Path, help="SQLite database (defaults to configuration)")
    parser.add_argument("--json", action="store_true", help="Print raw JSON instead of tables")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("overview", help="Distinct enzyme/family/component/variant counts")

    enzymes = sub.add_parser("enzymes", help="Page through enzymes")
    enzymes.add_argument("--family", type=int)
    enzymes.add_argument("--component", type=int)
    enzymes.add_argument("--has-component", choices=["true", "false"])
    enzymes.add_argument("--limit", type=int, default=50)
    enzymes.add_argument("--offset", type=int, default=0)

    for name, arg, help_text in (
        ("enzyme", "id_or_accession", "Show one enzyme by id or accession"),
        ("variants", "enzyme_id", "Variants clustered under a centroid"),
        ("family", "family_id", "Members of a family, centroid first"),
        ("component", "component_id", "Members of a component"),
        ("plate-average", "gene", "Average readout per plate for a gene"),
        ("plate-records", "gene", "Raw plate records for a gene"),
        ("activity", "gene", "Plate records with metadata for a gene"),
        ("experiment", "exp_id", "Plate records with metadata for an experiment"),
        ("stats", "accession", "Summary statistics of sequence features"),
    ):
        command = sub.add_parser(name, help=help_text)
        command.add_argument(arg)
    return parser


def run(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.app.log_level, settings.app.environment)

    database = Database(args.db) if args.db else Database.from_settings(settings)
    with database:
        taxonomy = TaxonomyService(database)
        plates = PlateAggregator(database)
        sequences = SequenceCatalog(database, pdb_base_url=settings.storage.pdb_base_url)
        try:
            _dispatch(args, taxonomy, plates, sequences)
        except (NotFoundError, ValidationError) as exc:
            console.print(f"[red]{exc}[/red]")
            return 1
    return 0


def _dispatch(
    args: argparse.Namespace,
    taxonomy: TaxonomyService,
    plates: PlateAggregator,
    sequences: SequenceCatalog,
) -> None:
    command = args.command
    if command == "overview":
        _render([taxonomy.get_overview_stats().model_dump()], "Overview", args.json)
    elif command == "enzymes":
        enzyme_filter = EnzymeFilter.from_params(
            {
                "family": args.family,
                "component": args.component,
                "has_component": args.has_component,
            }
        )
        page = taxonomy.list_enzymes(enzyme_filter, PageRequest(args.limit, args.offset))
        _render(dump_rows(page.rows), "Enzymes", args.json)
        pagination = page.pagination
        console.print(
            f"offset {pagination.offset}, {len(page.rows)} of {pagination.total}"
            + (" (more available)" if pagination.has_more else "")
        )
    elif command == "enzyme":
        _render([taxonomy.get_enzyme(args.id_or_accession).model_dump()], "Enzyme", args.json)
    elif command == "variants":
        _render(dump_rows(taxonomy.get_variants(args.enzyme_id)), "Variants", args.json)
    elif command == "family":
        _render(dump_rows(taxonomy.get_family_members(args.family_id)), "Family", args.json)
    elif command == "component":
        _render(
            dump_rows(taxonomy.get_component_members(args.component_id)), "Component", args.json
        )
    elif command == "plate-average":
        _render(dump_rows(plates.average_by_gene(args.gene)), "Plate averages", args.json)
    elif command == "plate-records":
        _render(dump_rows(plates.list_by_gene(args.gene)), "Plate records", args.json)
    elif command == "activity":
        _render(dump_rows(plates.activity_by_gene(args.gene)), "Activity", args.json)
    elif command == "experiment":
        _render(dump_rows(plates.activity_by_experiment(args.exp_id)), "Experiment", args.json)
    elif command == "stats":
        stats = sequences.get_summary_stats(args.accession)
        _render([stats.display()], f"Sequence stats: {args.accession}", args.json)


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
