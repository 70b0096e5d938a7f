"""
Ticket package catalog.

Responsibilities:
- Define the canonical TicketPackage record and the user preference schema.
- Load the static catalog from CSV into validated, read-only records.
"""
