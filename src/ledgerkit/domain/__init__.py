"""Domain layer for ledgerkit: entities, rules and services."""
