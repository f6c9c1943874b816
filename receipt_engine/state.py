"""
Persisted State Layout

One singleton per record type plus one record per member. The ledger
keeps no other durable state.
"""

from receipt_engine.models.ledger import Config, GlobalLedger, Member, Ownership
from receipt_engine.services.storage import Item, Map


CONFIG = Item("config", Config)
OWNERSHIP = Item("ownership", Ownership)
LEDGER = Item("ledger", GlobalLedger)
MEMBERS = Map("members", Member)
