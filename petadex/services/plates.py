"""Plate readout queries and per-plate averages."""

from __future__ import annotations

from typing import Any, List

from petadex.core.database import Database
from petadex.core.errors import NotFoundError
from petadex.core.query import absent_first_asc
from petadex.core.schemas import ActivityRow, GroupedAverage, PlateRecord
from petadex.core.validators import parse_identifier
from petadex.utils.logger import get_logger

logger = get_logger(__name__)

# Every plate_metadata column that identifies an experimental context. All of
# them are grouping keys, so plates whose metadata diverges stay separate.
METADATA_GROUP_COLUMNS = (
    "pm.timepoint_hours",
    "pm.temp_celsius",
    "pm.ph",
    "pm.media",
    "pm.organism",
    "pm.exp_id",
    "pm.exp_description",
    "pm.date_created",
    "pm.date_read",
)

PLATE_RECORD_COLUMNS = """
    pd.id,
    pd.gene,
    pd.plate,
    pd.plasmid,
    pd."column",
    pd."row",
    pd.normalization_method,
    pd.readout_value,
    pd.colony_size,
    pd.date_entered,
    pd.measurement_type
"""

ACTIVITY_COLUMNS = PLATE_RECORD_COLUMNS + """,
    pm.exp_id,
    pm.exp_description,
    pm.media,
    pm.timepoint_hours,
    pm.temp_celsius,
    pm.ph,
    pm.organism,
    pm.control_genes,
    pm.operator,
    pm.date_created,
    pm.date_read
"""


class PlateAggregator:
    """Raw and averaged plate readouts joined with their plate metadata."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def average_by_gene(self, gene: Any) -> List[GroupedAverage]:
        """Mean readout per (plate, measurement type, metadata) group.

        Null readouts are dropped before grouping. If two imports share a
        plate and measurement type but disagree on any metadata column they
        come back as separate groups.
        """
        gene = parse_identifier(gene, "gene")
        group_columns = ",\n                ".join(METADATA_GROUP_COLUMNS)
        rows = self._db.fetch_all(
            f"""
            SELECT
                pd.plate,
                pd.measurement_type,
                AVG(pd.readout_value) AS average_readout,
                COUNT(*) AS sample_count,
                {group_columns}
            FROM plate_data pd
            LEFT JOIN plate_metadata pm ON pd.plate = pm.plate
            WHERE pd.gene = ? AND pd.readout_value IS NOT NULL
            GROUP BY
                pd.plate,
                pd.measurement_type,
                {group_columns}
            ORDER BY {absent_first_asc("pm.timepoint_hours")}, pd.plate
            """,
            [gene],
        )
        if not rows:
            logger.info("plates.average_by_gene.not_found", gene=gene)
            raise NotFoundError("No plate readouts found for this gene", gene=gene)
        logger.info("plates.average_by_gene.end", gene=gene, groups=len(rows))
        return [GroupedAverage(**row) for row in rows]

    def list_by_gene(self, gene: Any) -> List[PlateRecord]:
        gene = parse_identifier(gene, "gene")
        rows = self._db.fetch_all(
            f"""
            SELECT {PLATE_RECORD_COLUMNS}
            FROM plate_data pd
            WHERE pd.gene = ?
            ORDER BY pd.plate, pd."row", pd."column"
            """,
            [gene],
        )
        if not rows:
            logger.info("plates.list_by_gene.not_found", gene=gene)
            raise NotFoundError("No plate records found for this gene", gene=gene)
        logger.info("plates.list_by_gene.end", gene=gene, records=len(rows))
        return [PlateRecord(**row) for row in rows]

    def activity_by_gene(self, gene: Any) -> List[ActivityRow]:
        gene = parse_identifier(gene, "gene")
        rows = self._db.fetch_all(
            f"""
            SELECT {ACTIVITY_COLUMNS}
            FROM plate_data pd
            LEFT JOIN plate_metadata pm ON pd.plate = pm.plate
            WHERE pd.gene = ?
            ORDER BY pd.plate, pd."row", pd."column"
            """,
            [gene],
        )
        if not rows:
            logger.info("plates.activity_by_gene.not_found", gene=gene)
            raise NotFoundError("No plate activity found for this gene", gene=gene)
        logger.info("plates.activity_by_gene.end", gene=gene, records=len(rows))
        return [ActivityRow(**row) for row in rows]

    def activity_by_experiment(self, exp_id: Any) -> List[ActivityRow]:
        exp_id = parse_identifier(exp_id, "exp_id")
        rows = self._db.fetch_all(
            f"""
            SELECT {ACTIVITY_COLUMNS}
            FROM plate_data pd
            INNER JOIN plate_metadata pm ON pd.plate = pm.plate
            WHERE pm.exp_id = ?
            ORDER BY pd.gene, pd.plate, pd."row", pd."column"
            """,
            [exp_id],
        )
        if not rows:
            logger.info("plates.activity_by_experiment.not_found", exp_id=exp_id)
            raise NotFoundError(
                "No plate activity found for this experiment", exp_id=exp_id
            )
        logger.info("plates.activity_by_experiment.end", exp_id=exp_id, records=len(rows))
        return [ActivityRow(**row) for row in rows]


__all__ = ["PlateAggregator"]
