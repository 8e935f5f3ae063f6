"""Claim domain: cached claim records and the submission transaction."""
