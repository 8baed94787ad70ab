"""Domain layer for bilanzkit application."""

_SERVICES = {
    "AccountService": "bilanzkit.domain.account",
    "ChartService": "bilanzkit.domain.chart",
    "FiscalYearService": "bilanzkit.domain.fiscal_year",
    "JournalService": "bilanzkit.domain.journal",
    "GuVService": "bilanzkit.domain.guv",
    "BalanceSheetService": "bilanzkit.domain.balance_sheet",
    "OpeningBalanceService": "bilanzkit.domain.opening_balance",
    "FiscalYearClosingService": "bilanzkit.domain.closing",
    "ClassificationMap": "bilanzkit.domain.classification",
    "ServiceResult": "bilanzkit.domain.results",
}

__all__ = list(_SERVICES)


# Services import the database port, which imports domain entities;
# resolve them lazily to keep that import order free of cycles.
def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
