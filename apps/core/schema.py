"""
Custom AutoSchema for automatic tag assignment
"""
from drf_spectacular.openapi import AutoSchema


class CustomAutoSchema(AutoSchema):
    """
    Custom schema that automatically assigns tags based on ViewSet and action
    """

    def get_tags(self):
        """Auto-assign tags based on ViewSet class and action"""
        tags = super().get_tags()

        if tags:
            return tags

        view = self.view
        view_name = view.__class__.__name__
        action = getattr(view, 'action', None)

        tag_mapping = {
            'ServiceViewSet': ['Services - Public'],
            'BusinessHoursViewSet': ['Schedules - Public'],
            'BookingViewSet': self._get_booking_tag(action),
        }

        return tag_mapping.get(view_name, ['api'])

    def _get_booking_tag(self, action):
        """Get tag for booking endpoints"""
        admin_actions = ['confirm', 'postpone', 'mark_refunded']
        if action in admin_actions:
            return ['Bookings - Admin']
        return ['Bookings - Customer']
