"""
Domain Layer - Pure Business Logic

This module contains the core domain logic with zero external dependencies.
All business rules, entities, value objects, and domain services reside here.

Structure:
- entities/: Core business entities (JobDefinition, Schedule, ExecutionRecord)
- value_objects/: Immutable value objects (TriggerSpec)
- services/: Domain services (schedule compiler)
- exceptions.py: Domain-specific exceptions
"""
