"""Database plumbing for the durable key-value store: engine, metadata, types, migrations."""
