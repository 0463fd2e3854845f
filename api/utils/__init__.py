"""Shared helpers: month keys, money formatting, audit metrics and report aggregation."""
