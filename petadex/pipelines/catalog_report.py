"""Markdown snapshot of the PETadex catalog database."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from tabulate import tabulate

from petadex.core.database import Database
from petadex.core.settings import get_settings
from petadex.services import TaxonomyService
from petadex.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

TOP_FAMILIES = 10


def summarize(database: Database, top_families: int = TOP_FAMILIES) -> Dict[str, Any]:
    taxonomy = TaxonomyService(database)
    totals = taxonomy.get_overview_stats().model_dump()

    families = database.fetch_all(
        """
        SELECT
            t.family,
            COUNT(*) AS members,
            MAX(CASE WHEN t.family_pid IS NULL THEN e.genbank_accession_id END) AS centroid,
            MIN(t.family_pid) AS min_identity
        FROM enzyme_taxonomy t
        JOIN enzyme_fastaa e ON e.enzyme_id = t.enzyme_id
        WHERE t.family IS NOT NULL
        GROUP BY t.family
        ORDER BY members DESC, t.family
        LIMIT ?
        """,
        [top_families],
    )

    components = database.fetch_all(
        """
        SELECT
            component,
            COUNT(DISTINCT family) AS families,
            COUNT(*) AS members
        FROM enzyme_taxonomy
        WHERE component IS NOT NULL
        GROUP BY component
        ORDER BY members DESC, component
        """
    )

    plate_coverage = database.fetch_all(
        """
        SELECT
            measurement_type,
            COUNT(DISTINCT gene) AS genes,
            COUNT(DISTINCT plate) AS plates,
            COUNT(readout_value) AS readouts
        FROM plate_data
        GROUP BY measurement_type
        ORDER BY readouts DESC
        """
    )

    return {
        "totals": totals,
        "families": families,
        "components": components,
        "plate_coverage": plate_coverage,
        "centroid_violations": [v.model_dump() for v in taxonomy.centroid_violations()],
    }


def write_report(database: Database, report_path: Path) -> None:
    summary = summarize(database)

    lines = ["# PETadex Catalog Snapshot", ""]

    totals = summary["totals"]
    lines.append("## Totals")
    lines.append(
        tabulate(
            [
                ("Enzymes", totals["total_enzymes"]),
                ("Families", totals["total_families"]),
                ("Components", totals["total_components"]),
                ("Variants", totals["total_variants"]),
            ],
            headers=["Metric", "Value"],
        )
    )
    lines.append("")

    lines.append("## Largest Families")
    lines.append(
        tabulate(
            [
                (row["family"], row["members"], row["centroid"], row["min_identity"])
                for row in summary["families"]
            ],
            headers=["Family", "Members", "Centroid", "Lowest % identity"],
            floatfmt=("", "", "", ".1f"),
        )
    )
    lines.append("")

    lines.append("## Components")
    lines.append(
        tabulate(
            [(row["component"], row["families"], row["members"]) for row in summary["components"]],
            headers=["Component", "Families", "Members"],
        )
    )
    lines.append("")

    lines.append("## Plate Coverage")
    lines.append(
        tabulate(
            [
                (row["measurement_type"], row["genes"], row["plates"], row["readouts"])
                for row in summary["plate_coverage"]
            ],
            headers=["Measurement", "Genes", "Plates", "Readouts"],
        )
    )

    violations = summary["centroid_violations"]
    if violations:
        lines.append("")
        lines.append("## Families Without Exactly One Centroid")
        lines.append(
            tabulate(
                [
                    (row["family"], row["member_count"], row["centroid_count"])
                    for row in violations
                ],
                headers=["Family", "Members", "Centroids"],
            )
        )

    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text("\n".join(lines) + "\n")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Generate markdown report from the PETadex DB")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("docs/catalog_snapshot.md"),
        help="Output markdown file",
    )
    parser.add_argument("--db", type=Path, help="SQLite database (defaults to configuration)")
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.app.log_level, settings.app.environment)

    database = Database(args.db) if args.db else Database.from_settings(settings)
    with database:
        write_report(database, args.output)
    logger.info("report.written", path=str(args.output))
    print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
