"""
Maintenance feature.

Maintenance requests (tickets) raised from the plant floor: creation with
photos, assignment to a technician, execution, validation by a supervisor
and the full PDF report of a closed ticket.
"""
