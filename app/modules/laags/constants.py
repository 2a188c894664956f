PLANNING = "Planning"
COMPLETED = "Completed"
CANCELLED = "Cancelled"

LAAG_STATUSES = (PLANNING, COMPLETED, CANCELLED)

PUBLIC = "public"

LAAG_TYPES = (
    "Birthday Celebration",
    "Summer Vacation",
    "Weekend Getaway",
    "Road Trip",
    "Beach Outing",
    "Hiking Adventure",
    "Food Trip",
    "Game Night",
    "Movie Marathon",
    "Study Session",
    "Sports Activity",
    "Concert/Festival",
    "Holiday Celebration",
    "Reunion",
    "Shopping Trip",
    "Staycation",
    "Other",
)

# Sort keys accepted by the group feed
SORT_FIELDS = ("created_at", "when_start", "estimated_cost", "actual_cost")

# Optional columns an edit may set back to null
CLEARABLE_FIELDS = ("why", "actual_cost", "fun_meter")
