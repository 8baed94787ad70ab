"""SKR03 classification tables and account templates.

The classification table maps account code ranges to report sections (RSIDs)
and presentation rules. The balance sheet template follows § 266 HGB, the GuV
sections follow § 275 Abs. 2 HGB (Gesamtkostenverfahren).
"""

# Balance sheet structure; RSIDs are the dot-joined key path ("b.aktiva....")
BALANCE_SHEET_TEMPLATE = [
    {
        "key": "aktiva",
        "name": "Aktiva",
        "children": [
            {
                "key": "anlagevermoegen",
                "name": "Anlagevermögen",
                "children": [
                    {
                        "key": "immaterielle_vermoegensgegenstaende",
                        "name": "Immaterielle Vermögensgegenstände",
                    },
                    {
                        "key": "sachanlagen",
                        "name": "Sachanlagen",
                        "children": [
                            {
                                "key": "grundstuecke_und_bauten",
                                "name": "Grundstücke, grundstücksgleiche Rechte und Bauten",
                            },
                            {
                                "key": "technische_anlagen_und_maschinen",
                                "name": "Technische Anlagen und Maschinen",
                            },
                            {
                                "key": "andere_anlagen_betriebs_und_geschaeftsausstattung",
                                "name": "Andere Anlagen, Betriebs- und Geschäftsausstattung",
                            },
                        ],
                    },
                    {"key": "finanzanlagen", "name": "Finanzanlagen"},
                ],
            },
            {
                "key": "umlaufvermoegen",
                "name": "Umlaufvermögen",
                "children": [
                    {"key": "vorraete", "name": "Vorräte"},
                    {
                        "key": "forderungen_und_sonstige_vermoegensgegenstaende",
                        "name": "Forderungen und sonstige Vermögensgegenstände",
                        "children": [
                            {
                                "key": "forderungen_aus_lieferungen_und_leistungen",
                                "name": "Forderungen aus Lieferungen und Leistungen",
                            },
                            {
                                "key": "forderungen_gegen_verbundene_unternehmen",
                                "name": "Forderungen gegen verbundene Unternehmen",
                            },
                            {
                                "key": "sonstige_vermoegensgegenstaende",
                                "name": "Sonstige Vermögensgegenstände",
                            },
                        ],
                    },
                    {"key": "wertpapiere", "name": "Wertpapiere"},
                    {
                        "key": "liquide_mittel",
                        "name": "Kassenbestand, Guthaben bei Kreditinstituten und Schecks",
                    },
                ],
            },
            {"key": "rechnungsabgrenzungsposten", "name": "Rechnungsabgrenzungsposten"},
        ],
    },
    {
        "key": "passiva",
        "name": "Passiva",
        "children": [
            {
                "key": "eigenkapital",
                "name": "Eigenkapital",
                "children": [
                    {"key": "gezeichnetes_kapital", "name": "Gezeichnetes Kapital"},
                    {"key": "ruecklagen", "name": "Kapital- und Gewinnrücklagen"},
                    {
                        "key": "gewinnvortrag_verlustvortrag",
                        "name": "Gewinnvortrag/Verlustvortrag",
                    },
                ],
            },
            {
                "key": "rueckstellungen",
                "name": "Rückstellungen",
                "children": [
                    {"key": "steuerrueckstellungen", "name": "Steuerrückstellungen"},
                    {"key": "sonstige_rueckstellungen", "name": "Sonstige Rückstellungen"},
                ],
            },
            {
                "key": "verbindlichkeiten",
                "name": "Verbindlichkeiten",
                "children": [
                    {
                        "key": "verbindlichkeiten_gegenueber_kreditinstituten",
                        "name": "Verbindlichkeiten gegenüber Kreditinstituten",
                    },
                    {
                        "key": "verbindlichkeiten_aus_lieferungen_und_leistungen",
                        "name": "Verbindlichkeiten aus Lieferungen und Leistungen",
                    },
                    {
                        "key": "verbindlichkeiten_gegenueber_verbundenen_unternehmen",
                        "name": "Verbindlichkeiten gegenüber verbundenen Unternehmen",
                    },
                    {"key": "sonstige_verbindlichkeiten", "name": "Sonstige Verbindlichkeiten"},
                ],
            },
            {"key": "rechnungsabgrenzungsposten", "name": "Rechnungsabgrenzungsposten"},
        ],
    },
]

GUV_SECTIONS = [
    {
        "key": "revenue",
        "label": "1. Umsatzerlöse",
        "rsids": ["g.umsatzerloese"],
        "display_type": "positive",
        "group": "operating",
    },
    {
        "key": "other_operating_income",
        "label": "4. Sonstige betriebliche Erträge",
        "rsids": ["g.sonstige_betriebliche_ertraege"],
        "display_type": "positive",
        "group": "operating",
    },
    {
        "key": "material_expense",
        "label": "5. Materialaufwand",
        "rsids": ["g.materialaufwand"],
        "display_type": "negative",
        "group": "operating",
    },
    {
        "key": "personnel_expense",
        "label": "6. Personalaufwand",
        "rsids": ["g.personalaufwand"],
        "display_type": "negative",
        "group": "operating",
    },
    {
        "key": "depreciation",
        "label": "7. Abschreibungen",
        "rsids": ["g.abschreibungen"],
        "display_type": "negative",
        "group": "operating",
    },
    {
        "key": "other_operating_expense",
        "label": "8. Sonstige betriebliche Aufwendungen",
        "rsids": ["g.sonstige_betriebliche_aufwendungen"],
        "display_type": "negative",
        "group": "operating",
    },
    {
        "key": "interest_income",
        "label": "11. Sonstige Zinsen und ähnliche Erträge",
        "rsids": ["g.zinsertraege"],
        "display_type": "positive",
        "group": "financial",
    },
    {
        "key": "interest_expense",
        "label": "13. Zinsen und ähnliche Aufwendungen",
        "rsids": ["g.zinsaufwendungen"],
        "display_type": "negative",
        "group": "financial",
    },
    {
        "key": "income_taxes",
        "label": "14. Steuern vom Einkommen und vom Ertrag",
        "rsids": ["g.steuern_vom_einkommen_und_ertrag"],
        "display_type": "negative",
        "group": "taxes",
    },
    {
        "key": "other_taxes",
        "label": "16. Sonstige Steuern",
        "rsids": ["g.sonstige_steuern"],
        "display_type": "negative",
        "group": "taxes",
    },
]

_SACHANLAGEN = "b.aktiva.anlagevermoegen.sachanlagen"
_FORDERUNGEN = "b.aktiva.umlaufvermoegen.forderungen_und_sonstige_vermoegensgegenstaende"
_EIGENKAPITAL = "b.passiva.eigenkapital"
_VERBINDLICHKEITEN = "b.passiva.verbindlichkeiten"

CLASSIFICATIONS = [
    # Anlagevermögen
    {"codes": "0010-0049", "rsid": "b.aktiva.anlagevermoegen.immaterielle_vermoegensgegenstaende", "presentation_rule": "asset_only"},
    {"codes": "0050-0199", "rsid": f"{_SACHANLAGEN}.grundstuecke_und_bauten", "presentation_rule": "asset_only"},
    {"codes": "0200-0299", "rsid": f"{_SACHANLAGEN}.technische_anlagen_und_maschinen", "presentation_rule": "asset_only"},
    {"codes": "0300-0499", "rsid": f"{_SACHANLAGEN}.andere_anlagen_betriebs_und_geschaeftsausstattung", "presentation_rule": "asset_only"},
    {"codes": "0500-0599", "rsid": "b.aktiva.anlagevermoegen.finanzanlagen", "presentation_rule": "asset_only"},
    # Langfristige Verbindlichkeiten
    {"codes": "0600-0699", "rsid": f"{_VERBINDLICHKEITEN}.verbindlichkeiten_gegenueber_kreditinstituten", "presentation_rule": "liability_only"},
    {"codes": "0700-0729", "rsid": f"{_VERBINDLICHKEITEN}.verbindlichkeiten_gegenueber_verbundenen_unternehmen", "presentation_rule": "payable_affiliated"},
    {"codes": "0730-0799", "rsid": f"{_VERBINDLICHKEITEN}.sonstige_verbindlichkeiten", "presentation_rule": "liability_only"},
    # Eigenkapital
    {"codes": "0800-0839", "rsid": f"{_EIGENKAPITAL}.gezeichnetes_kapital", "presentation_rule": "equity_only"},
    {"codes": "0840-0859", "rsid": f"{_EIGENKAPITAL}.ruecklagen", "presentation_rule": "equity_only"},
    {"codes": "0860-0869", "rsid": f"{_EIGENKAPITAL}.gewinnvortrag_verlustvortrag", "presentation_rule": "equity_only"},
    {"codes": "0870-0899", "rsid": _EIGENKAPITAL, "presentation_rule": "equity_only"},
    # Rückstellungen und Rechnungsabgrenzung
    {"codes": "0950-0969", "rsid": "b.passiva.rueckstellungen.steuerrueckstellungen", "presentation_rule": "liability_only"},
    {"codes": "0970-0979", "rsid": "b.passiva.rueckstellungen.sonstige_rueckstellungen", "presentation_rule": "liability_only"},
    {"codes": "0980-0989", "rsid": "b.aktiva.rechnungsabgrenzungsposten", "presentation_rule": "asset_only"},
    {"codes": "0990-0999", "rsid": "b.passiva.rechnungsabgrenzungsposten", "presentation_rule": "liability_only"},
    # Finanz- und Privatkonten
    {"codes": "1000-1099", "rsid": "b.aktiva.umlaufvermoegen.liquide_mittel", "presentation_rule": "asset_only"},
    {"codes": "1100-1299", "rsid": "b.aktiva.umlaufvermoegen.liquide_mittel", "presentation_rule": "bank_bidirectional"},
    {"codes": "1300-1399", "rsid": "b.aktiva.umlaufvermoegen.wertpapiere", "presentation_rule": "asset_only"},
    {"codes": "1400-1499", "rsid": f"{_FORDERUNGEN}.forderungen_aus_lieferungen_und_leistungen", "presentation_rule": "fll_standard"},
    {"codes": "1500-1569", "rsid": f"{_FORDERUNGEN}.sonstige_vermoegensgegenstaende", "presentation_rule": "asset_only"},
    {"codes": "1570-1589", "rsid": f"{_FORDERUNGEN}.sonstige_vermoegensgegenstaende", "presentation_rule": "tax_standard"},
    {"codes": "1590-1599", "rsid": f"{_FORDERUNGEN}.sonstige_vermoegensgegenstaende", "presentation_rule": "asset_only"},
    {"codes": "1600-1699", "rsid": f"{_VERBINDLICHKEITEN}.verbindlichkeiten_aus_lieferungen_und_leistungen", "presentation_rule": "vll_standard"},
    {"codes": "1700-1769", "rsid": f"{_VERBINDLICHKEITEN}.sonstige_verbindlichkeiten", "presentation_rule": "liability_only"},
    {"codes": "1770-1799", "rsid": f"{_VERBINDLICHKEITEN}.sonstige_verbindlichkeiten", "presentation_rule": "tax_standard"},
    {"codes": "1800-1899", "rsid": _EIGENKAPITAL, "presentation_rule": "equity_only"},
    # Abgrenzungskonten (GuV)
    {"codes": "2100-2149", "rsid": "g.zinsaufwendungen", "presentation_rule": "pnl_only"},
    {"codes": "2200-2289", "rsid": "g.steuern_vom_einkommen_und_ertrag", "presentation_rule": "pnl_only"},
    {"codes": "2300-2399", "rsid": "g.sonstige_betriebliche_aufwendungen", "presentation_rule": "pnl_only"},
    {"codes": "2650-2699", "rsid": "g.zinsertraege", "presentation_rule": "pnl_only"},
    {"codes": "2700-2749", "rsid": "g.sonstige_betriebliche_ertraege", "presentation_rule": "pnl_only"},
    # Wareneingang und Bestände
    {"codes": "3000-3969", "rsid": "g.materialaufwand.bezogene_waren", "presentation_rule": "pnl_only"},
    {"codes": "3970-3989", "rsid": "b.aktiva.umlaufvermoegen.vorraete", "presentation_rule": "asset_only"},
    # Betriebliche Aufwendungen
    {"codes": "4000-4099", "rsid": "g.materialaufwand.roh_hilfs_und_betriebsstoffe", "presentation_rule": "pnl_only"},
    {"codes": "4100-4129", "rsid": "g.personalaufwand.loehne_und_gehaelter", "presentation_rule": "pnl_only"},
    {"codes": "4130-4199", "rsid": "g.personalaufwand.soziale_abgaben", "presentation_rule": "pnl_only"},
    {"codes": "4200-4319", "rsid": "g.sonstige_betriebliche_aufwendungen", "presentation_rule": "pnl_only"},
    {"codes": "4320-4329", "rsid": "g.steuern_vom_einkommen_und_ertrag", "presentation_rule": "pnl_only"},
    {"codes": "4330-4339", "rsid": "g.sonstige_betriebliche_aufwendungen", "presentation_rule": "pnl_only"},
    {"codes": "4340-4349", "rsid": "g.sonstige_steuern", "presentation_rule": "pnl_only"},
    {"codes": "4350-4819", "rsid": "g.sonstige_betriebliche_aufwendungen", "presentation_rule": "pnl_only"},
    {"codes": "4820-4859", "rsid": "g.abschreibungen", "presentation_rule": "pnl_only"},
    {"codes": "4860-4999", "rsid": "g.sonstige_betriebliche_aufwendungen", "presentation_rule": "pnl_only"},
    # Erlöse
    {"codes": "8000-8599", "rsid": "g.umsatzerloese", "presentation_rule": "pnl_only"},
    {"codes": "8600-8999", "rsid": "g.sonstige_betriebliche_ertraege", "presentation_rule": "pnl_only"},
]

# Positions for accounts the classification table does not cover
DEFAULT_RSIDS = {
    "asset": f"{_FORDERUNGEN}.sonstige_vermoegensgegenstaende",
    "liability": f"{_VERBINDLICHKEITEN}.sonstige_verbindlichkeiten",
    "equity": _EIGENKAPITAL,
    "revenue": "g.sonstige_betriebliche_ertraege",
    "expense": "g.sonstige_betriebliche_aufwendungen",
}

SKR03_TABLE = {
    "balance_sheet": BALANCE_SHEET_TEMPLATE,
    "guv_sections": GUV_SECTIONS,
    "classifications": CLASSIFICATIONS,
    "default_rsids": DEFAULT_RSIDS,
}

# Account templates seeded into a new SKR03 chart of accounts:
# (code, name, account_type, presentation_rule, is_system_account)
ACCOUNT_TEMPLATES = [
    ("0027", "EDV-Software", "asset", None, False),
    ("0420", "Technische Anlagen", "asset", None, False),
    ("0480", "Geringwertige Wirtschaftsgüter", "asset", None, False),
    ("0490", "Sonstige Betriebs- und Geschäftsausstattung", "asset", None, False),
    ("0630", "Verbindlichkeiten gegenüber Kreditinstituten", "liability", None, False),
    ("0750", "Verbindlichkeiten gegenüber Gesellschaftern", "liability", None, False),
    ("0800", "Gezeichnetes Kapital", "equity", None, False),
    ("0840", "Kapitalrücklage", "equity", None, False),
    ("0860", "Gewinnvortrag vor Verwendung", "equity", None, False),
    ("0868", "Verlustvortrag vor Verwendung", "equity", None, False),
    ("0970", "Sonstige Rückstellungen", "liability", None, False),
    ("1000", "Kasse", "asset", None, False),
    ("1200", "Bank", "asset", None, False),
    ("1400", "Forderungen aus Lieferungen und Leistungen", "asset", None, False),
    ("1529", "Zurückzuzahlende Vorsteuer", "asset", None, False),
    ("1571", "Abziehbare Vorsteuer 7 %", "asset", None, False),
    ("1576", "Abziehbare Vorsteuer 19 %", "asset", None, False),
    ("1600", "Verbindlichkeiten aus Lieferungen und Leistungen", "liability", None, False),
    ("1740", "Verbindlichkeiten aus Lohn und Gehalt", "liability", None, False),
    ("1771", "Umsatzsteuer 7 %", "liability", None, False),
    ("1776", "Umsatzsteuer 19 %", "liability", None, False),
    ("1780", "Umsatzsteuer-Vorauszahlungen", "liability", None, False),
    ("1800", "Privatentnahmen allgemein", "equity", None, False),
    ("2110", "Zinsaufwendungen für kurzfristige Verbindlichkeiten", "expense", None, False),
    ("2200", "Körperschaftsteuer", "expense", None, False),
    ("2650", "Sonstige Zinsen und ähnliche Erträge", "revenue", None, False),
    ("3400", "Wareneingang 19 % Vorsteuer", "expense", None, False),
    ("4100", "Löhne und Gehälter", "expense", None, False),
    ("4130", "Gesetzliche soziale Aufwendungen", "expense", None, False),
    ("4210", "Miete", "expense", None, False),
    ("4830", "Abschreibungen auf Sachanlagen", "expense", None, False),
    ("4930", "Bürobedarf", "expense", None, False),
    ("4970", "Nebenkosten des Geldverkehrs", "expense", None, False),
    ("8400", "Erlöse 19 % USt", "revenue", None, False),
    ("8300", "Erlöse 7 % USt", "revenue", None, False),
    ("9000", "Saldenvorträge, Sachkonten", "equity", None, True),
    ("9008", "Saldenvorträge, Debitoren", "equity", None, True),
    ("9009", "Saldenvorträge, Kreditoren", "equity", None, True),
]
