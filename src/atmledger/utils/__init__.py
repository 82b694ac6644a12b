"""Utility functions for atmledger."""

from atmledger.utils.amount_parser import parse_amount, to_money
from atmledger.utils.clock import utcnow
from atmledger.utils.security import hash_pin, verify_pin

__all__ = ["parse_amount", "to_money", "utcnow", "hash_pin", "verify_pin"]
