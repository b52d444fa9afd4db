"""
fragment_ingestion -- Streaming XML fragment ingestion.

Reads large XML documents one record fragment at a time, maps each fragment
to an item and resumes after a restart by re-skipping consumed fragments.

Architecture:
    reader/    the fragment cursor reader (no config imports)
    adapters/  SourceAdapter protocol + XML fragment adapter (dict records)
    services/  builds readers from fragment_config definitions
"""
