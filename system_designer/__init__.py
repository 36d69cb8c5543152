"""
System Designer model toolkit.

This package builds MSON software models (entities, attributes, methods,
relationships), renders them as UML, and converts them into System Runtime
bundles with schema and type-model declarations that can be validated
before deployment.
"""

__version__ = "0.1.0"
