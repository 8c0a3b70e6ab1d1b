EVENTS_URL = "/api/v1/events"
JOINED_EVENTS_URL = "/api/v1/events/joined"
EVENT_URL = "/api/v1/events/{event_id}"
EVENT_SUMMARY_URL = "/api/v1/events/{event_id}/summary"
ENTRANT_STATUS_URL = "/api/v1/events/{event_id}/status"
WAITLIST_URL = "/api/v1/events/{event_id}/waitlist"
WAITLIST_SIZE_URL = "/api/v1/events/{event_id}/waitlist/size"
WAITLIST_LOCATIONS_URL = "/api/v1/events/{event_id}/waitlist/locations"
DRAW_URL = "/api/v1/lottery/draw"
COMPLETE_LOTTERY_URL = "/api/v1/events/{event_id}/lottery/complete"
