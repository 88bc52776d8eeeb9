from ledger.stores.django_store import DjangoLedgerStore
from ledger.stores.interfaces import AggregateStore, HolderStore, PendingItemStore

__all__ = ["AggregateStore", "DjangoLedgerStore", "HolderStore", "PendingItemStore"]
