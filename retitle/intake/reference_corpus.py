"""Reference corpus (master list) loading.

The reference corpus is the ordered list of known document names that input
filenames are reconciled against. It is read from a text file with one name
per line, or from the first column of a CSV file. When no file is given the
built-in sample list is used.
"""

import csv
from pathlib import Path
from typing import List, Optional

# Sample master list of document names from a corporate knowledge base
DEFAULT_REFERENCE_NAMES: List[str] = [
    # Annual reports
    "annual_report_2023",
    "annual_report_2022",
    "annual_report_2021",
    "ar2023_en_book",
    "ar2023_fr_book",
    "ar2024_en_book",
    "ar2024_fr_book",
    # Environmental reports
    "environmental_report_2023",
    "environmental_report_2022",
    "emr2023_en_book",
    "emr2023_fr_book",
    "emr2024_en_book",
    "emr2024_fr_book",
    # Financial statements
    "financial_statements_q1_2023",
    "financial_statements_q2_2023",
    "financial_statements_q3_2023",
    "financial_statements_q4_2023",
    "financial_statements_q1_2024",
    "financial_statements_q2_2024",
    # Presentations
    "investor_presentation_2023",
    "investor_presentation_q1_2023",
    "investor_presentation_q2_2023",
    "investor_presentation_q3_2023",
    "investor_presentation_q4_2023",
    "investor_presentation_2024",
    # Press releases
    "press_release_q1_2023_results",
    "press_release_q2_2023_results",
    "press_release_q3_2023_results",
    "press_release_q4_2023_results",
    "press_release_annual_2023",
    "press_release_q1_2024_results",
    # Sustainability reports
    "sustainability_report_2023",
    "sustainability_report_2022",
    "sustainability_report_2021",
    "sr2023_en_book",
    "sr2023_fr_book",
    "sr2024_en_book",
    # Corporate governance
    "corporate_governance_report_2023",
    "corporate_governance_report_2022",
    "cg2023_en_book",
    "cg2023_fr_book",
    "cg2024_en_book",
    # Miscellaneous documents
    "company_bylaws",
    "code_of_conduct",
    "ethics_policy",
    "diversity_inclusion_report",
    "risk_assessment_2023",
    "strategic_plan_2023_2025",
]


def load_reference_corpus(path: Optional[Path] = None) -> List[str]:
    """Load the reference corpus.

    Blank lines and lines starting with ``#`` are skipped. Order and
    duplicates are preserved.

    Args:
        path: Text or CSV file. If None, the built-in sample list is returned.

    Returns:
        Ordered list of reference names.

    Raises:
        OSError: If the file cannot be read.
    """
    if path is None:
        return list(DEFAULT_REFERENCE_NAMES)

    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        if path.suffix.lower() == ".csv":
            lines = [row[0] if row else "" for row in csv.reader(f)]
        else:
            lines = f.read().splitlines()

    names: List[str] = []
    for line in lines:
        name = line.strip()
        if not name or name.startswith("#"):
            continue
        names.append(name)
    return names
