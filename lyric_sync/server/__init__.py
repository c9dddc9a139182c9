"""HTTP API for the lyric engine (FastAPI app in app.py, schemas in models.py)."""
