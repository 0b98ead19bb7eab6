"""Core domain layer - entities, interfaces, services and exceptions."""

from fitbill.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
