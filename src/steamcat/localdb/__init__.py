"""Steam client local storage — a per-user, namespaced key-value store.

Layout inside the LevelDB database:
    _https://steamloopback.host\\0\\x01U<user>-cloud-storage-namespaces
        → JSON array of [index, ...] pairs, one per namespace (oldest first)
    _https://steamloopback.host\\0\\x01U<user>-cloud-storage-namespace-<index>
        → JSON array of [key, record] pairs (the namespace aggregate)

Every value is one format-tag byte followed by encoded JSON text
(see `steamcat.localdb.codec`).
"""
