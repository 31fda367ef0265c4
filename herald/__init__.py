"""Herald relays GitHub webhook activity into Pokémon Showdown chat rooms."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
