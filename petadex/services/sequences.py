"""Sequence, feature-set and predicted-structure lookups by accession."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from petadex.core.database import Database
from petadex.core.errors import NotFoundError
from petadex.core.schemas import PdbStructure, SequenceFeatureSet, SequenceRecord
from petadex.core.settings import get_settings
from petadex.core.validators import parse_identifier
from petadex.services.sequence_stats import SummaryStats, compute_stats
from petadex.utils.logger import get_logger

logger = get_logger(__name__)

SEQUENCE_COLUMNS = """
    f.accession,
    f.aa_sequence AS sequence,
    f.source,
    f.synonyms,
    f.date_entered,
    f.genotype,
    f.genotype_description,
    f.synthetic,
    f.parent_accessions,
    f.parent_genes,
    f.in_gene_metadata,
    EXISTS (
        SELECT 1
        FROM with_sra_and_biosample_loc_metadata m
        WHERE m.accession = f.accession
    ) AS in_sra_metadata
"""

PDB_COLUMNS = "pdb_id, accession, technique, relaxed, date_created, date_entered, alignment"


class SequenceCatalog:
    def __init__(self, database: Database, *, pdb_base_url: Optional[str] = None) -> None:
        self._db = database
        if pdb_base_url is None:
            pdb_base_url = get_settings().storage.pdb_base_url
        self._pdb_base_url = pdb_base_url.rstrip("/")

    def list_sequences(self) -> List[SequenceRecord]:
        rows = self._db.fetch_all(
            f"SELECT {SEQUENCE_COLUMNS} FROM fastaa f ORDER BY f.accession ASC"
        )
        return [SequenceRecord(**row) for row in rows]

    def get_sequence(self, accession: Any) -> SequenceRecord:
        accession = parse_identifier(accession, "accession")
        row = self._db.fetch_one(
            f"SELECT {SEQUENCE_COLUMNS} FROM fastaa f WHERE f.accession = ?",
            [accession],
        )
        if row is None:
            logger.info("sequences.get_sequence.not_found", accession=accession)
            raise NotFoundError("Sequence not found", accession=accession)
        return SequenceRecord(**row)

    def get_features(self, accession: Any) -> SequenceFeatureSet:
        accession = parse_identifier(accession, "accession")
        row = self._db.fetch_one(
            """
            SELECT accession, mass, pi, hpath, sequence_length
            FROM aa_seq_features
            WHERE accession = ?
            """,
            [accession],
        )
        if row is None:
            logger.info("sequences.get_features.not_found", accession=accession)
            raise NotFoundError("Sequence features not found", accession=accession)
        return SequenceFeatureSet(**row)

    def get_summary_stats(self, accession: Any) -> SummaryStats:
        return compute_stats(self.get_features(accession))

    def get_structure_by_accession(self, accession: Any) -> PdbStructure:
        """Most recently created structure for an accession."""
        accession = parse_identifier(accession, "accession")
        row = self._db.fetch_one(
            f"""
            SELECT {PDB_COLUMNS}
            FROM pdb_accessions
            WHERE accession = ?
            ORDER BY date_created DESC
            LIMIT 1
            """,
            [accession],
        )
        if row is None:
            logger.info("sequences.get_structure.not_found", accession=accession)
            raise NotFoundError(
                "No PDB structure found for this accession", accession=accession
            )
        return self._structure(row)

    def get_structure(self, pdb_id: Any) -> PdbStructure:
        pdb_id = parse_identifier(pdb_id, "pdb_id")
        row = self._db.fetch_one(
            f"SELECT {PDB_COLUMNS} FROM pdb_accessions WHERE pdb_id = ?",
            [pdb_id],
        )
        if row is None:
            logger.info("sequences.get_structure.not_found", pdb_id=pdb_id)
            raise NotFoundError("PDB structure not found", pdb_id=pdb_id)
        return self._structure(row)

    def _structure(self, row: Dict[str, Any]) -> PdbStructure:
        return PdbStructure(**row, pdb_url=f"{self._pdb_base_url}/{row['pdb_id']}.pdb")


__all__ = ["SequenceCatalog"]
