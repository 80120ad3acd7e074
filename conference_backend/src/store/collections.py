"""
Collection names of the conference document store.

The names are shared with the web client and must not change.
"""

CONFERENCE = "conference"
CONFERENCE_DASHBOARD = "conference-dashboard"
CONFERENCE_DASHBOARD_HISTORY = "conference-dashboard-history"
CONFERENCE_HALL_CONFIG = "conference-hall-config"
VOXXRIN_CONFIG = "voxxrin-config"
CONFERENCE_SECRET = "conferenceSecret"
SESSION = "session"
PERSON = "person"
PERSON_EMAILS = "person_emails"
CONFERENCE_SPEAKER = "conference-speaker"
ACTIVITY = "activity"
ACTIVITY_PARTICIPATION = "activityParticipation"
SESSION_ALLOCATION = "session-allocation"
SLOT_TYPE = "slot-type"
PLATFORM_CONFIG = "platform-config"

# Conference-scoped collections whose documents carry a top-level
# ``conferenceId`` field, in cascade order.
CONFERENCE_SCOPED = (
    CONFERENCE_SPEAKER,
    ACTIVITY_PARTICIPATION,
    ACTIVITY,
    SESSION_ALLOCATION,
    CONFERENCE_SECRET,
)

# Sessions nest their conference reference
SESSION_CONFERENCE_ID_FIELD = "conference.conferenceId"
