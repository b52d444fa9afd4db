"""
fragment_kernel -- Shared primitives for the fragment reader.

Typed exceptions (exceptions.py), structured logging (logging_config.py) and
the host restart-state carrier (context.py). No imports from
fragment_ingestion or fragment_config.
"""
