# eventhub/calendar_utils.py

import urllib.parse
from datetime import timezone as dt_timezone
from icalendar import Calendar, Event as ICalEvent
from django.utils import timezone
from django.http import HttpResponse
from django.urls import reverse
from django.utils.text import slugify


def _event_location(event):
    if event.is_online:
        return event.url or "Online"
    parts = [event.location, event.landmark, event.campus_location]
    return ", ".join(p for p in parts if p)


def generate_ics_file(event, request):
    """
    Build an .ics download for an event (and its sub-events as extra VEVENTs).

    Args:
        event: Event model instance
        request: Django request object (for building absolute URLs)

    Returns:
        HttpResponse with the .ics file
    """
    cal = Calendar()
    cal.add('prodid', '-//Campus Event Hub//Event Calendar//EN')
    cal.add('version', '2.0')

    for item in [event, *event.sub_events.all()]:
        ical_event = ICalEvent()
        ical_event.add('uid', f"eventhub-{item.id}-{int(item.updated_at.timestamp())}@{request.get_host()}")
        ical_event.add('summary', item.title)
        ical_event.add('description', item.description)
        ical_event.add('location', _event_location(item))
        ical_event.add('dtstart', item.start_at)
        ical_event.add('dtend', item.end_at)
        ical_event.add('dtstamp', timezone.now())
        ical_event.add('url', request.build_absolute_uri(reverse('event_detail', args=[item.id])))

        if item.status == 'cancelled':
            ical_event.add('status', 'CANCELLED')
        elif item.status == 'published':
            ical_event.add('status', 'CONFIRMED')
        else:
            ical_event.add('status', 'TENTATIVE')

        cal.add_component(ical_event)

    response = HttpResponse(cal.to_ical(), content_type='text/calendar; charset=utf-8')
    filename = f"event_{event.id}_{slugify(event.title) or 'event'}.ics"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    response['Cache-Control'] = 'no-cache, no-store, must-revalidate'
    return response


def generate_google_calendar_link(event, request):
    """Google Calendar "add event" link for a single event."""
    base_url = 'https://calendar.google.com/calendar/render'
    event_url = request.build_absolute_uri(reverse('event_detail', args=[event.id]))

    # Google expects UTC in YYYYMMDDTHHmmssZ
    fmt = '%Y%m%dT%H%M%SZ'
    start_date = event.start_at.astimezone(dt_timezone.utc).strftime(fmt)
    end_date = event.end_at.astimezone(dt_timezone.utc).strftime(fmt)

    params = [
        ('action', 'TEMPLATE'),
        ('text', event.title),
        ('dates', f'{start_date}/{end_date}'),
        ('details', f"{event.description}\n\n{event_url}".strip()),
        ('location', _event_location(event)),
        ('sprop', 'name:Campus Event Hub'),
        ('sprop', f'website:{event_url}'),
    ]
    query_string = '&'.join([f'{k}={urllib.parse.quote(str(v))}' for k, v in params])
    return f'{base_url}?{query_string}'
