from zabaan.client.sync import QueuedTransaction, XpSyncQueue

__all__ = ["QueuedTransaction", "XpSyncQueue"]
