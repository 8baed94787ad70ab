"""Utility functions for bilanzkit."""

from bilanzkit.utils.date_parser import parse_date
from bilanzkit.utils.amount_parser import parse_amount
from bilanzkit.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_amount", "resolve_account"]
