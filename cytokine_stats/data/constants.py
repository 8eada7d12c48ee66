"""Constants for the cytokine dataset."""

COHORT_COLUMN = "cohort"
SEX_COLUMN = "sex"
AGE_COLUMN = "age"
SAMPLE_ID_COLUMN = "sample_id"

COHORTS = ["Healthy Controls", "Disease Active", "Disease Remission"]
SEXES = ["F", "M"]

CYTOKINES = ["IL-2", "IL-6", "TNF", "IL-10", "IFN-γ"]

# Geometric-mean concentration (pg/mL) per cohort used by the example dataset
COHORT_GEOMEANS = {
    "Healthy Controls": {"IL-2": 2.0, "IL-6": 3.0, "TNF": 8.0, "IL-10": 5.0, "IFN-γ": 6.0},
    "Disease Active": {"IL-2": 6.0, "IL-6": 25.0, "TNF": 30.0, "IL-10": 12.0, "IFN-γ": 20.0},
    "Disease Remission": {"IL-2": 3.0, "IL-6": 7.0, "TNF": 12.0, "IL-10": 8.0, "IFN-γ": 9.0},
}

EXCEL_SUFFIXES = {".xlsx", ".xls", ".xlsm"}
DELIMITED_SUFFIXES = {".csv": ",", ".tsv": "\t", ".txt": "\t"}
