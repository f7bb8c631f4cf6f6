"""HTTP API for transcription, segmentation and active-line lookup.

WHY: Browser front ends and other tools need the player's core over HTTP.

HOW: app.py holds the FastAPI app, models.py its pydantic schemas.
"""
