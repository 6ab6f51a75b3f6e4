"""Reconciliation domain: entities, matching, linking and sync services."""
