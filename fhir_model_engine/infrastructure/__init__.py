"""Infrastructure layer for the FHIR model engine.

Adapters for the catalog files, interchange text formats, logging and
caching. It implements the ports defined in the application layer.
"""

__all__ = []
