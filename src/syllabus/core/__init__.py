"""Core pipeline modules.

- schema: record shape and boundary parser
- extractor: document text -> ExtractedRecord via the generation service
- merger: syllabus + schedule reconciliation
- validator: advisory consistency warnings
- pipeline: concurrent extraction, merge, validate, catalog hand-off
"""

__all__ = [
    "schema",
    "extractor",
    "merger",
    "validator",
    "pipeline",
]
