"""Data models returned by the catalog services."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator


class EnzymeRecord(BaseModel):
    enzyme_id: int
    accession: Optional[str] = None
    translated_sequence: Optional[str] = None
    family: Optional[int] = None
    # None marks the family centroid; it is never the same as 0.0
    family_percent_identity: Optional[float] = None
    component: Optional[int] = None

    @computed_field  # type: ignore[misc]
    @property
    def is_centroid(self) -> bool:
        return self.family is not None and self.family_percent_identity is None


class VariantRecord(BaseModel):
    variant_id: int
    enzyme_id: int
    accession: Optional[str] = None
    enzyme_percent_identity: Optional[float] = None


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int
    has_more: bool = Field(serialization_alias="hasMore")


class EnzymePage(BaseModel):
    rows: List[EnzymeRecord]
    pagination: Pagination


class OverviewStats(BaseModel):
    total_enzymes: int
    total_families: int
    total_components: int
    total_variants: int


class CentroidViolation(BaseModel):
    family: int
    member_count: int
    centroid_count: int


class PlateRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: Optional[int] = None
    gene: str
    plate: str
    plasmid: Optional[str] = None
    row: Optional[str] = None
    column: Optional[int] = None
    readout_value: Optional[float] = None
    measurement_type: Optional[str] = None
    colony_size: Optional[float] = None
    normalization_method: Optional[str] = None
    date_entered: Optional[str] = None


class ActivityRow(PlateRecord):
    exp_id: Optional[str] = None
    exp_description: Optional[str] = None
    media: Optional[str] = None
    timepoint_hours: Optional[float] = None
    temp_celsius: Optional[float] = None
    ph: Optional[float] = None
    organism: Optional[str] = None
    control_genes: Optional[str] = None
    operator: Optional[str] = None
    date_created: Optional[str] = None
    date_read: Optional[str] = None


class GroupedAverage(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    plate: str
    measurement_type: Optional[str] = None
    average_readout: float
    sample_count: int
    timepoint_hours: Optional[float] = None
    temp_celsius: Optional[float] = None
    ph: Optional[float] = None
    media: Optional[str] = None
    organism: Optional[str] = None
    exp_id: Optional[str] = None
    exp_description: Optional[str] = None
    date_created: Optional[str] = None
    date_read: Optional[str] = None


class SequenceFeatureSet(BaseModel):
    """Per-residue features for one sequence, index-aligned.

    Stored arrays may hold nulls for residues without a computed value; the
    positions are kept so indices still line up with the sequence.
    """

    accession: Optional[str] = None
    mass: List[Optional[float]] = Field(default_factory=list)
    pi: List[Optional[float]] = Field(
        default_factory=list, validation_alias=AliasChoices("pi", "pI")
    )
    hydropathy: List[Optional[float]] = Field(
        default_factory=list, validation_alias=AliasChoices("hydropathy", "hpath")
    )
    sequence_length: int = Field(
        default=0, validation_alias=AliasChoices("sequence_length", "sequenceLength")
    )

    @field_validator("mass", "pi", "hydropathy", mode="before")
    @classmethod
    def _decode_array(cls, value: Any) -> Any:
        # arrays are stored as JSON text
        if value is None:
            return []
        if isinstance(value, (str, bytes)):
            return json.loads(value) if value else []
        return value

    @field_validator("sequence_length", mode="before")
    @classmethod
    def _default_length(cls, value: Any) -> Any:
        return 0 if value is None else value


class SequenceRecord(BaseModel):
    accession: str
    sequence: Optional[str] = None
    source: Optional[str] = None
    synonyms: Optional[str] = None
    date_entered: Optional[str] = None
    genotype: Optional[str] = None
    genotype_description: Optional[str] = None
    synthetic: Optional[bool] = None
    parent_accessions: Optional[str] = None
    parent_genes: Optional[str] = None
    in_gene_metadata: Optional[bool] = None
    in_sra_metadata: Optional[bool] = None


class PdbStructure(BaseModel):
    pdb_id: str
    accession: Optional[str] = None
    technique: Optional[str] = None
    relaxed: Optional[bool] = None
    date_created: Optional[str] = None
    date_entered: Optional[str] = None
    alignment: Optional[str] = None
    pdb_url: str


def dump_rows(rows: List[BaseModel]) -> List[Dict[str, Any]]:
    return [row.model_dump(by_alias=True) for row in rows]


__all__ = [
    "ActivityRow",
    "CentroidViolation",
    "EnzymePage",
    "EnzymeRecord",
    "GroupedAverage",
    "OverviewStats",
    "Pagination",
    "PdbStructure",
    "PlateRecord",
    "SequenceFeatureSet",
    "SequenceRecord",
    "VariantRecord",
    "dump_rows",
]
