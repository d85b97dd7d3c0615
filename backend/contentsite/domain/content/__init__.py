"""Content collections: file reader, store-backed repository, admin mutations and migration."""
