"""Directory bounded context.

Owns the authoritative record of users and groups, the provisioning job
ledger and the SCIM-like protocol adapter built on top of them.
"""
