import json
import sqlite3
import sys
from pathlib import Path
from typing import Iterator

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from petadex.core.database import Database

SCHEMA = """
CREATE TABLE enzyme_fastaa (
    enzyme_id INTEGER PRIMARY KEY,
    genbank_accession_id TEXT,
    translated_sequence TEXT
);

CREATE TABLE enzyme_taxonomy (
    enzyme_id INTEGER PRIMARY KEY,
    family INTEGER,
    family_pid REAL,
    component INTEGER
);

CREATE TABLE variant_dictionary (
    variant_id INTEGER PRIMARY KEY,
    enzyme_id INTEGER NOT NULL,
    genbank_accession_id TEXT,
    enzyme_pid REAL
);

CREATE TABLE plate_data (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    gene TEXT NOT NULL,
    plate TEXT NOT NULL,
    plasmid TEXT,
    "row" TEXT,
    "column" INTEGER,
    normalization_method TEXT,
    readout_value REAL,
    colony_size REAL,
    date_entered TEXT,
    measurement_type TEXT
);

CREATE TABLE plate_metadata (
    plate TEXT NOT NULL,
    exp_id TEXT,
    exp_description TEXT,
    media TEXT,
    timepoint_hours REAL,
    temp_celsius REAL,
    ph REAL,
    organism TEXT,
    control_genes TEXT,
    operator TEXT,
    date_created TEXT,
    date_read TEXT
);

CREATE TABLE fastaa (
    accession TEXT PRIMARY KEY,
    aa_sequence TEXT,
    source TEXT,
    synonyms TEXT,
    date_entered TEXT,
    genotype TEXT,
    genotype_description TEXT,
    synthetic INTEGER,
    parent_accessions TEXT,
    parent_genes TEXT,
    in_gene_metadata INTEGER
);

CREATE TABLE with_sra_and_biosample_loc_metadata (
    accession TEXT,
    biosample TEXT
);

CREATE TABLE aa_seq_features (
    accession TEXT PRIMARY KEY,
    mass TEXT,
    pi TEXT,
    hpath TEXT,
    sequence_length INTEGER
);

CREATE TABLE pdb_accessions (
    pdb_id TEXT PRIMARY KEY,
    accession TEXT,
    technique TEXT,
    relaxed INTEGER,
    date_created TEXT,
    date_entered TEXT,
    alignment TEXT
);
"""

ENZYMES = [
    (1, "ACC001", "MNFPRASRLMQAAVLGGLMAVSAAATAQTNPYARGPNPTAASLEASAGPFTVRSFTVSRPSGYGAGTVYYPTNAGGTVGAIAIVPGYTARQSSIKWWGPRLASHGFVVITIDTNSTLDQPSSRSSQQMAALRQVASLNGTSSSPIYGKVDTARMGVMGWSMGGGGSLISAANNPSLKAAAPQAPWDSSTNFSSVTVPTLIFACENDSIAPVNSSALPIYDSMSRNAKQFLEINGGSHSCANSGNSNQALIGKKGVAWMKRFMDNDTRYSTFACENPNSTRVSDFRTANCS"),
    (2, "ACC002", "MNFPRASRLMQAAVLGGLMAVSAAAT"),
    (3, "ACC003", "MRLLALLAGAVAA"),
    (4, "ACC004", "MKKILALAGLLAA"),
    (5, "ACC005", "MSTNPYQRGPNPT"),
    (6, "ACC006", "MAAAAGGGG"),
    (7, "ACC007", "MKKILALAGLLSS"),
]

TAXONOMY = [
    (1, 10, None, 100),
    (2, 10, 92.5, 100),
    (3, 10, 80.0, 100),
    (4, 20, None, 100),
    (5, 30, None, None),
    (7, 20, 0.0, 100),
]

VARIANTS = [
    (1, 1, "VAR001", 75.0),
    (2, 1, "VAR002", None),
    (3, 1, "VAR003", 90.0),
    (4, 4, "VAR004", 88.0),
]

PLATE_DATA = [
    ("PET001", "P1", "pET21", "A", 1, "OD600", 10.0, 1.2, "2024-02-01", "activity"),
    ("PET001", "P1", "pET21", "A", 2, "OD600", 20.0, 1.1, "2024-02-01", "activity"),
    ("PET001", "P1", "pET21", "A", 3, "OD600", None, 0.9, "2024-02-01", "activity"),
    ("PET001", "P2", "pET21", "B", 1, "OD600", 30.0, 1.0, "2024-02-02", "activity"),
    ("PET001", "P0", "pET21", "C", 1, "OD600", 5.0, 1.0, "2024-01-15", "activity"),
    ("PET002", "P1", "pET21", "B", 4, "OD600", None, 0.5, "2024-02-01", "activity"),
    ("PET003", "P3", "pET28", "A", 1, "OD600", 4.0, 1.0, "2024-03-01", "activity"),
    ("PET003", "P3", "pET28", "A", 2, "OD600", 6.0, 1.0, "2024-03-01", "activity"),
]

PLATE_METADATA = [
    ("P0", "E2", "baseline screen", "LB", None, 30.0, 7.0, "E. coli", None, "op1", "2024-01-15", "2024-01-16"),
    ("P1", "E1", "PET film assay", "LB", 24.0, 30.0, 7.5, "E. coli", "ACC001", "op1", "2024-02-01", "2024-02-02"),
    ("P2", "E1", "PET film assay", "LB", 48.0, 30.0, 7.5, "E. coli", "ACC001", "op1", "2024-02-02", "2024-02-04"),
    ("P3", "E3", "media comparison", "LB", 12.0, 37.0, 7.0, "E. coli", None, "op2", "2024-03-01", "2024-03-01"),
    ("P3", "E3", "media comparison", "TB", 12.0, 37.0, 7.0, "E. coli", None, "op2", "2024-03-01", "2024-03-01"),
]

FASTAA = [
    ("ACC001", "MNFPRASRLMQAAVLGG", "IsPETase", "PETase", "2023-05-01", "WT", "wild type", 0, None, None, 1),
    ("ACC002", "MRLLALLAGAVAA", "metagenome", None, "2023-05-02", None, None, 0, None, None, 0),
]

FEATURES = [
    ("ACC001", json.dumps([100, 200, 150]), json.dumps([6.0, 7.0]), json.dumps([0.3, 0.6, 0.8]), 3),
    ("ACC002", json.dumps([]), json.dumps([]), json.dumps([]), 0),
    ("ACC009", json.dumps([100, None]), json.dumps([6.0, None]), json.dumps([0.9, None]), 2),
]

# ACC001 has two biosample rows; the flag must not duplicate the sequence
SRA_METADATA = [
    ("ACC001", "SAMN0001"),
    ("ACC001", "SAMN0002"),
]

PDB = [
    ("PDB_A", "ACC001", "AlphaFold", 0, "2024-01-01", "2024-01-02", None),
    ("PDB_B", "ACC001", "AlphaFold", 1, "2024-06-01", "2024-06-02", None),
]


def build_catalog(db_path: Path) -> Path:
    conn = sqlite3.connect(db_path)
    conn.executescript(SCHEMA)
    conn.executemany("INSERT INTO enzyme_fastaa VALUES (?, ?, ?)", ENZYMES)
    conn.executemany("INSERT INTO enzyme_taxonomy VALUES (?, ?, ?, ?)", TAXONOMY)
    conn.executemany("INSERT INTO variant_dictionary VALUES (?, ?, ?, ?)", VARIANTS)
    conn.executemany(
        """
        INSERT INTO plate_data (
            gene, plate, plasmid, "row", "column", normalization_method,
            readout_value, colony_size, date_entered, measurement_type
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        PLATE_DATA,
    )
    conn.executemany(
        "INSERT INTO plate_metadata VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        PLATE_METADATA,
    )
    conn.executemany(
        "INSERT INTO fastaa VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)", FASTAA
    )
    conn.executemany(
        "INSERT INTO with_sra_and_biosample_loc_metadata VALUES (?, ?)", SRA_METADATA
    )
    conn.executemany("INSERT INTO aa_seq_features VALUES (?, ?, ?, ?, ?)", FEATURES)
    conn.executemany("INSERT INTO pdb_accessions VALUES (?, ?, ?, ?, ?, ?, ?)", PDB)
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture()
def catalog_path(tmp_path: Path) -> Path:
    return build_catalog(tmp_path / "petadex.db")


@pytest.fixture()
def database(catalog_path: Path) -> Iterator[Database]:
    with Database(catalog_path) as db:
        yield db
