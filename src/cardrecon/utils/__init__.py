"""Utility functions for cardrecon."""

from cardrecon.utils.date_parser import parse_date, parse_billing_month
from cardrecon.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_billing_month", "parse_amount"]
