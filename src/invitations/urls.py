EVENT_INVITATIONS_URL = "/api/v1/events/{event_id}/invitations"
EVENT_INVITATIONS_STREAM_URL = "/api/v1/events/{event_id}/invitations/stream"
MY_INVITATIONS_URL = "/api/v1/invitations"
INVITATION_URL = "/api/v1/invitations/{invitation_id}"
ACCEPT_INVITATION_URL = "/api/v1/invitations/{invitation_id}/accept"
REJECT_INVITATION_URL = "/api/v1/invitations/{invitation_id}/reject"
CANCEL_INVITATION_URL = "/api/v1/invitations/{invitation_id}/cancel"
