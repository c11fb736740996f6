# eventhub/permissions.py

from rest_framework import permissions


class IsOrganizerOrAdmin(permissions.BasePermission):
    """Permission class to check if user is an organizer or admin."""

    message = "Only organizers and administrators can do this"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role in ['organizer', 'admin']
        )
