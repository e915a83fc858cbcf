"""Network-backed collaborators: contract metadata and name resolution."""
