"""Enzyme taxonomy queries: families, components, centroids and variants."""

from __future__ import annotations

from typing import Any, List, Optional, Union

from petadex.core.database import Database
from petadex.core.errors import NotFoundError
from petadex.core.query import EnzymeFilter, PageRequest, absent_first_desc
from petadex.core.schemas import (
    CentroidViolation,
    EnzymePage,
    EnzymeRecord,
    OverviewStats,
    Pagination,
    VariantRecord,
)
from petadex.core.validators import parse_identifier, parse_positive_int
from petadex.utils.logger import get_logger

logger = get_logger(__name__)

ENZYME_COLUMNS = """
    e.enzyme_id,
    e.genbank_accession_id AS accession,
    e.translated_sequence,
    t.family,
    t.family_pid AS family_percent_identity,
    t.component
"""


class TaxonomyService:
    """Read-only access to the enzyme family/component/variant hierarchy."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def list_enzymes(
        self,
        enzyme_filter: Optional[EnzymeFilter] = None,
        page: Optional[PageRequest] = None,
    ) -> EnzymePage:
        """Page through enzymes in ``enzyme_id`` order.

        Unclassified enzymes stay visible through the left join unless a
        family or component filter is given, which needs a matching
        taxonomy row. An empty page is a valid result.
        """
        enzyme_filter = enzyme_filter or EnzymeFilter()
        page = page or PageRequest()
        where, params = enzyme_filter.predicate().sql()

        rows = self._db.fetch_all(
            f"""
            SELECT {ENZYME_COLUMNS}
            FROM enzyme_fastaa e
            LEFT JOIN enzyme_taxonomy t ON e.enzyme_id = t.enzyme_id
            {where}
            ORDER BY e.enzyme_id
            LIMIT ? OFFSET ?
            """,
            [*params, page.limit, page.offset],
        )
        total = self._db.fetch_scalar(
            f"""
            SELECT COUNT(*)
            FROM enzyme_fastaa e
            LEFT JOIN enzyme_taxonomy t ON e.enzyme_id = t.enzyme_id
            {where}
            """,
            params,
        )
        total = int(total or 0)
        records = [EnzymeRecord(**row) for row in rows]
        logger.info(
            "taxonomy.list_enzymes.end",
            family=enzyme_filter.family,
            component=enzyme_filter.component,
            has_component=enzyme_filter.has_component,
            limit=page.limit,
            offset=page.offset,
            returned=len(records),
            total=total,
        )
        return EnzymePage(
            rows=records,
            pagination=Pagination(
                limit=page.limit,
                offset=page.offset,
                total=total,
                has_more=page.offset + len(records) < total,
            ),
        )

    def get_enzyme(self, id_or_accession: Union[int, str]) -> EnzymeRecord:
        """Look an enzyme up by numeric id, or by accession for anything else."""
        if isinstance(id_or_accession, int) or (
            isinstance(id_or_accession, str) and id_or_accession.strip().isdigit()
        ):
            enzyme_id = parse_positive_int(id_or_accession, "enzyme_id")
            return self._get_one("e.enzyme_id = ?", enzyme_id, "enzyme_id")
        return self.get_enzyme_by_accession(id_or_accession)

    def get_enzyme_by_accession(self, accession: Any) -> EnzymeRecord:
        accession = parse_identifier(accession, "accession")
        return self._get_one("e.genbank_accession_id = ?", accession, "accession")

    def get_variants(self, enzyme_id: Any) -> List[VariantRecord]:
        """Variants clustered under a centroid; unknown identity sorts first.

        Returns an empty list when the enzyme has no variants.
        """
        enzyme_id = parse_positive_int(enzyme_id, "enzyme_id")
        rows = self._db.fetch_all(
            f"""
            SELECT
                v.variant_id,
                v.enzyme_id,
                v.genbank_accession_id AS accession,
                v.enzyme_pid AS enzyme_percent_identity
            FROM variant_dictionary v
            WHERE v.enzyme_id = ?
            ORDER BY {absent_first_desc("v.enzyme_pid")}, v.variant_id
            """,
            [enzyme_id],
        )
        logger.info("taxonomy.get_variants.end", enzyme_id=enzyme_id, count=len(rows))
        return [VariantRecord(**row) for row in rows]

    def get_family_members(self, family_id: Any) -> List[EnzymeRecord]:
        family_id = parse_positive_int(family_id, "family_id")
        rows = self._db.fetch_all(
            f"""
            SELECT {ENZYME_COLUMNS}
            FROM enzyme_fastaa e
            INNER JOIN enzyme_taxonomy t ON e.enzyme_id = t.enzyme_id
            WHERE t.family = ?
            ORDER BY {absent_first_desc("t.family_pid")}, e.enzyme_id
            """,
            [family_id],
        )
        if not rows:
            logger.info("taxonomy.get_family_members.not_found", family=family_id)
            raise NotFoundError("No enzymes found for this family", family=family_id)
        return [EnzymeRecord(**row) for row in rows]

    def get_component_members(self, component_id: Any) -> List[EnzymeRecord]:
        component_id = parse_positive_int(component_id, "component_id")
        rows = self._db.fetch_all(
            f"""
            SELECT {ENZYME_COLUMNS}
            FROM enzyme_fastaa e
            INNER JOIN enzyme_taxonomy t ON e.enzyme_id = t.enzyme_id
            WHERE t.component = ?
            ORDER BY t.family, {absent_first_desc("t.family_pid")}, e.enzyme_id
            """,
            [component_id],
        )
        if not rows:
            logger.info("taxonomy.get_component_members.not_found", component=component_id)
            raise NotFoundError(
                "No enzymes found for this component", component=component_id
            )
        return [EnzymeRecord(**row) for row in rows]

    def get_overview_stats(self) -> OverviewStats:
        # one subquery per count; joining variants to taxonomy would fan out
        row = self._db.fetch_one(
            """
            SELECT
                (SELECT COUNT(*) FROM enzyme_fastaa) AS total_enzymes,
                (SELECT COUNT(DISTINCT family) FROM enzyme_taxonomy) AS total_families,
                (SELECT COUNT(DISTINCT component) FROM enzyme_taxonomy) AS total_components,
                (SELECT COUNT(*) FROM variant_dictionary) AS total_variants
            """
        )
        stats = OverviewStats(**row)
        logger.info("taxonomy.get_overview_stats.end", **stats.model_dump())
        return stats

    def centroid_violations(self) -> List[CentroidViolation]:
        """Families that do not have exactly one member with absent identity."""
        rows = self._db.fetch_all(
            """
            SELECT
                family,
                COUNT(*) AS member_count,
                SUM(CASE WHEN family_pid IS NULL THEN 1 ELSE 0 END) AS centroid_count
            FROM enzyme_taxonomy
            WHERE family IS NOT NULL
            GROUP BY family
            HAVING SUM(CASE WHEN family_pid IS NULL THEN 1 ELSE 0 END) != 1
            ORDER BY family
            """
        )
        if rows:
            logger.warning("taxonomy.centroid_violations", families=len(rows))
        return [CentroidViolation(**row) for row in rows]

    def _get_one(self, condition: str, value: Any, field: str) -> EnzymeRecord:
        row = self._db.fetch_one(
            f"""
            SELECT {ENZYME_COLUMNS}
            FROM enzyme_fastaa e
            LEFT JOIN enzyme_taxonomy t ON e.enzyme_id = t.enzyme_id
            WHERE {condition}
            """,
            [value],
        )
        if row is None:
            logger.info("taxonomy.get_enzyme.not_found", **{field: value})
            raise NotFoundError("Enzyme not found", **{field: value})
        return EnzymeRecord(**row)


__all__ = ["TaxonomyService"]
