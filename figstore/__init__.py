"""
figstore: named ASCII-art figures served over HTTP.

Figures are kept in a short-lived Redis cache in front of an optional
Postgres table; see ``figstore.store`` for how the two tiers combine.
"""
