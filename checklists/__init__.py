"""
Checklists feature.

Food-safety and quality-control forms (cleanliness, staff practices,
materials control, final product tasting, weighing/sealing, mixed
product). Each form validates its data, renders a PDF, uploads it to the
checklist's storage bucket and persists a row with the PDF URL.
"""
