"""List query contract shared by the hospital back office list screens."""
