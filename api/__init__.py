"""HTTP layer over the echeancier engine (FastAPI)."""
