"""Static ledger reference table.

Selecting a ledger name on a line item fills its accounting code from this
table.  The table is read-only for the lifetime of the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Tuple


@dataclass(frozen=True)
class LedgerEntry:
    name: str
    code: str


LEDGERS: Tuple[LedgerEntry, ...] = (
    LedgerEntry("Conference and Seminar Expense", "E-1008"),
    LedgerEntry("Research Seminar Series Expense", "E-1014"),
    LedgerEntry("Event Expenses", "E-1030"),
    LedgerEntry("Fresher / Farewell Expenses", "E-1032"),
    LedgerEntry("Orientation Day Expense", "E-1038"),
    LedgerEntry("ACCA Course Study Expenses", "F-1047"),
    LedgerEntry("Consumables (Lab Use)", "F-1049"),
    LedgerEntry("Immersion Programme Expenses", "F-1055"),
    LedgerEntry("Study Material Expenses", "F-1072"),
    LedgerEntry("Student Activities/ Project Expenses", "F-1071"),
    LedgerEntry("Foundation Programme Expense", "F-1058"),
    LedgerEntry("Adjunct Faculty Charges", "G-1094"),
    LedgerEntry("Academic Professional/consultancy Fees", "G-1092"),
    LedgerEntry("Fellowship- Ph.D Student (Full Time)", "H-1118"),
    LedgerEntry("Accreditation Fees", "J-1162"),
    LedgerEntry("Conveyance Expense", "J-1169"),
    LedgerEntry("Guest Refreshment & Travelling Expense", "J-1172"),
    LedgerEntry("Honorarium & Sitting Fees", "J-1174"),
    LedgerEntry("Miscellaneous Office Expense", "J-1184"),
    LedgerEntry("Recruitment Expenses", "J-1193"),
    LedgerEntry("Stationery & Printing Expenses", "J-1198"),
    LedgerEntry("Tea & Refreshment Expenses", "J-1201"),
    LedgerEntry("Institutional Membership Fees", "J-1178"),
    LedgerEntry("Branding and Promotion", "K-1206"),
    LedgerEntry("Digital & Social Media Marketing", "K-1207"),
    LedgerEntry("Domestic Outreach Expenses", "K-1208"),
    LedgerEntry("Maintenance - Other Equipments", "L-1216"),
    LedgerEntry("Maintenance of IT Assets", "L-1219"),
    LedgerEntry("Waste Removal Charges", "L-1222"),
    LedgerEntry("Software Maintenance Charges", "L-1221"),
    LedgerEntry("Building Repairs & Maintenance", "L-1224"),
    LedgerEntry("IT Hardwares & Consumables", "L-1227"),
    LedgerEntry("Faculty Development Allowance", "M-1231"),
    LedgerEntry("International Conference & Seminar Expenses - T", "M-1232"),
    LedgerEntry("National Conference & Seminar Support - T", "M-1235"),
    LedgerEntry("Employee wellness & recreation", "M-1237"),
    LedgerEntry("Students' Workshops & Seminars Expense", "N-1242"),
    LedgerEntry("Student Training / Industrial Visits Expense", "N-1245"),
    LedgerEntry("Domestic Travel Expenses", "Q-1290"),
    LedgerEntry("Foreign Travel Expenses", "Q-1291"),
)

_CODES_BY_NAME: Mapping[str, str] = MappingProxyType(
    {entry.name: entry.code for entry in LEDGERS}
)


def ledger_code_for(name: str) -> str:
    """Return the code for ``name`` or an empty string when it is unknown."""

    return _CODES_BY_NAME.get(name, "")


def ledger_names() -> List[str]:
    return [entry.name for entry in LEDGERS]


__all__ = ["LEDGERS", "LedgerEntry", "ledger_code_for", "ledger_names"]
