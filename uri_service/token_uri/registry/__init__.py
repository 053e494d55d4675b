"""
Token URI configuration and resolution.

`ConfigStore` holds the per-token settings, `UriResolver` turns them into
location strings, and `FilesystemConfigStore` keeps them on disk.
"""
