"""
lab2hpo — Configuration
=======================
Centralised config for resource paths, logging and reference-dataset format.
Loads overrides from the project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent          # repo root
DATA_DIR = PROJECT_ROOT / "data"

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

LOG_LEVEL: str = os.getenv("LAB2HPO_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LAB2HPO_LOG_FILE") or None

ANNOTATION_FILE: str = os.getenv("LAB2HPO_ANNOTATION_FILE", str(DATA_DIR / "annotations.tsv"))
HPO_FILE: str = os.getenv("LAB2HPO_HPO_FILE", str(DATA_DIR / "hp.json"))
RULES_FILE: str = os.getenv("LAB2HPO_RULES_FILE", str(DATA_DIR / "rules.json"))

# ── Reference dataset layout ────────────────────────────────────────────
# One row per (LOINC, internal code) annotation, tab separated.
ANNOTATION_FIELD_COUNT = 13
ANNOTATION_HEADER_MARKER = "loincId"

FIELD_LOINC_ID = 0
FIELD_SCALE = 1
FIELD_INTERNAL_CODE = 3
FIELD_HPO_TERM = 4
FIELD_NEGATED = 5
FIELD_FINALIZED = 11

# ── Code systems ────────────────────────────────────────────────────────
LOINC_SYSTEM = "http://loinc.org"
HPO_PURL_PREFIX = "http://purl.obolibrary.org/obo/HP_"
