FEED_URL = "/api/v1/notifications"
FEED_STREAM_URL = "/api/v1/notifications/stream"
NOTIFICATION_URL = "/api/v1/notifications/{notification_id}"
EVENT_NOTIFICATIONS_URL = "/api/v1/events/{event_id}/notifications"
