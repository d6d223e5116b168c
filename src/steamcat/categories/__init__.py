"""Steam library categories ("collections") stored in local storage.

A collection is an entry whose key starts with `user-collections.` and whose
value is a JSON string:

    {"id": "ssg-My-Games", "name": "My Games", "added": [...], "removed": [...],
     "filterSpec": {...}}

`records` holds the data model and payload codec, `manager` reads and writes
them through the entry store, and `editor` mutates them in memory.
"""
