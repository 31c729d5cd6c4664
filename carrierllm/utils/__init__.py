"""
Shared helpers: JSON extraction, numeric coercion and pacing.
"""
