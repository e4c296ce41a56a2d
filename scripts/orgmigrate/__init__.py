"""GitHub organisation migration toolkit.

Resolves identities between a source and a destination organisation,
exports team / repository access / mannequin mappings, rebuilds
permissions, audits secrets and reconciles repository visibility.
"""
