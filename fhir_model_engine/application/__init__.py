"""Application layer for the FHIR model engine.

Wires the domain services into the ``ModelEngine`` facade and defines the
ports the infrastructure layer implements.
"""
