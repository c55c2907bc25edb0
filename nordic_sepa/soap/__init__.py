"""Envelope rendering, canonicalization, signing and schema checks."""
