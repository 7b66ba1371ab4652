"""
Sen - Hidden-information card game engine

A deterministic, server-authoritative engine for the Sen dream card game.
The engine provides:
- A static card catalog and deck builder
- The authoritative game state model
- A pure action validator and state reducer
- Round scoring with the wake-up penalty
- Per-viewer projections that hide face-down cards

Rendering, lobbies and transport live outside the engine; a thin
in-memory host and a FastAPI app are bundled for local play.
"""

__version__ = "0.1.0"
