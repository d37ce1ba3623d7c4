"""
File Registry

Ephemeral file registry: staged uploads are moved into permanent storage,
addressed by short public identifiers, and purged after their retention window.
"""

__version__ = "1.0.0"
