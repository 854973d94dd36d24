"""
PDF overlay editor module.

Renders page 1 of a PDF into a preview surface, keeps a collection of
draggable text overlays placed on that preview, and burns them into a new
PDF (reportlab overlay merged with pypdf) that can be handed to a persist
adapter.
"""
