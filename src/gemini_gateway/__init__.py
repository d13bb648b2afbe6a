"""
Gemini Gateway package.

Provides:
- Model fallback/retry dispatcher for the Generative Language API
- PDF export of plain text
- FastAPI app wiring both behind /generate and /exportPDF
"""
