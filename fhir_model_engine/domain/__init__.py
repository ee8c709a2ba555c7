"""Domain layer for the FHIR model engine.

This layer contains the schema model, record instances and the engine
services (registry, choice resolution, validation, tree codec). It does no
I/O and does not depend on the infrastructure layer.
"""
