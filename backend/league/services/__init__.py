"""
Services Layer

Pure league logic that:
- Accepts domain inputs (ids, sessions, Tournament rows)
- Returns domain outputs (models, dataclasses, lists)
- Does NOT depend on any front end
- Only league_engine commits; the other modules mutate rows in memory or not at all
"""
