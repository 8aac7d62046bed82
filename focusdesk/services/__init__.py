"""Service layer: one function per operation, each a short unit of work on one pooled connection."""
