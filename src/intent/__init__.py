"""Intent extraction and validation.

The intent layer converts a free-text guest message into a strict, immutable `Intent` record, which
is then enriched by the field resolver and dispatched by the query router.
"""
