"""
Constants for the AN01 bid-analysis parsers.

Keywords, column positions and default values shared by the sheet parsers.
Everything that describes the layout of an AN01 workbook lives here so the
parsers themselves only contain the scanning logic.
"""

# --- Sheet classification ---
SHEET_SYNTHESIS_NAME = "synthese"
SHEET_LOT_MARKER = "LOT"
SHEET_QT_MARKER = "QT"
SHEET_GENERIC_QT_NAME = "ANALYSE QT"
SHEET_AN01_MARKER = "AN01"
SHEET_LOT_WORD = "lot"

# --- Global metadata ("Synthèse" sheet) ---
GLOBAL_METADATA_FIRST_ROW = 1  # row 2
GLOBAL_METADATA_LAST_ROW = 7  # row 8
GLOBAL_METADATA_LABEL_COL = 0
GLOBAL_METADATA_VALUE_COL = 1

# --- Lot metadata block ---
METADATA_SCAN_ROWS = 25
METADATA_KEY_CONSULTATION = "CONSULTATION"
METADATA_KEY_DATE = "DATE"
METADATA_KEY_DESCRIPTION = "DESCRIPTION"
METADATA_KEY_BUYER = "ACHETEUR"
METADATA_KEY_REQUESTER = "DEMANDEUR"
METADATA_KEY_TVA = "TVA"

# Metadata field -> keyword searched in the row
METADATA_FIELD_KEYWORDS = {
    "consultation": METADATA_KEY_CONSULTATION,
    "date": METADATA_KEY_DATE,
    "description": METADATA_KEY_DESCRIPTION,
    "buyer": METADATA_KEY_BUYER,
    "requester": METADATA_KEY_REQUESTER,
}

DEFAULT_CONSULTATION = "Non spécifié"
DEFAULT_METADATA_VALUE = "-"
DEFAULT_TVA = "20%"

# --- Offer table ---
TABLE_PARSE_HEADER = "raison sociale"
OFFER_DATA_OFFSET = 2  # one sub-header row is always skipped
TABLE_PARSE_STOP_MARKERS = (
    "calcul des gains",
    "moyenne des offres",
    "prix histo",
    "offre retenue",
)

OFFER_COL_NAME = 0
OFFER_COL_RANK_FINAL = 1
OFFER_COL_SCORE_FINAL = 2
OFFER_COL_RANK_FINANCIAL = 3
OFFER_COL_SCORE_FINANCIAL = 4
OFFER_COL_RANK_TECHNICAL = 5
OFFER_COL_SCORE_TECHNICAL = 6
OFFER_COL_AMOUNT_TTC = 7

RANK_SENTINEL = 99
WINNER_RANK = 1

# --- Technical scoring matrix ---
TECH_HEADER_ROW = 0
TECH_FIRST_DATA_ROW = 1
TECH_FIRST_CANDIDATE_COL = 3
TECH_MAX_SCORE_COL = 1
TECH_CRITERION_NAME_COL = 2
TECH_STOP_PREFIX = "total"
TECH_STOP_MARKER = "note technique globale"
