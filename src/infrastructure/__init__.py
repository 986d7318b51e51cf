"""
Infrastructure Layer - External System Adapters

This module contains adapters that implement the application ports,
handling communication with the workflow engine, the broker and databases.

Structure:
- adapters/scheduler/: Workflow engine adapters (APScheduler, in-memory)
- adapters/broker/: Trading API adapters (Alpaca, in-memory)
- adapters/persistence/: Database adapters (PostgreSQL, in-memory)
"""
