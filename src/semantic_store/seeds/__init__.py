"""
Seed data for demos and smoke tests.

Separating data from infrastructure keeps sample content out of the
store and service code.
"""

from semantic_store.seeds.financial_insights import (
    get_sample_documents,
    seed_workspace,
)

__all__ = ["get_sample_documents", "seed_workspace"]
