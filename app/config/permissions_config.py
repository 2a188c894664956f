"""
Permissions and Policy Configuration
Defines every action of every resource and the rule that decides who may perform it.
Route handlers never compare ids themselves; they call core.dependencies.authorize()
with a permission name from this matrix.

Rules:
- any                      any signed-in, non-deleted profile
- self                     the profile being acted on is the caller
- admin                    caller's profile role is "admin"
- group_member             caller owns the group or has an active groupMembers row
- group_owner              caller is groups.owner
- group_owner_or_admin     group_owner, or admin
- laag_viewer              laag is public, or caller is a group_member of the laag's group
- laag_member              caller is a group_member of the laag's group
- laag_organizer           caller is laags.organizer
- laag_organizer_or_admin  laag_organizer, or admin
- comment_author           caller is comments.user_id
- notification_recipient   caller is laagNotificationReads.user_id
"""

ANY = "any"
SELF = "self"
ADMIN = "admin"
GROUP_MEMBER = "group_member"
GROUP_OWNER = "group_owner"
GROUP_OWNER_OR_ADMIN = "group_owner_or_admin"
LAAG_VIEWER = "laag_viewer"
LAAG_MEMBER = "laag_member"
LAAG_ORGANIZER = "laag_organizer"
LAAG_ORGANIZER_OR_ADMIN = "laag_organizer_or_admin"
COMMENT_AUTHOR = "comment_author"
NOTIFICATION_RECIPIENT = "notification_recipient"

# resource -> action -> (rule, description)
MODULES = {
    "profiles": {
        "read": (ANY, "View a profile card"),
        "update": (SELF, "Update own account settings"),
        "list": (ADMIN, "List all user accounts"),
        "delete": (ADMIN, "Deactivate a user account"),
    },
    "groups": {
        "create": (ANY, "Create a group"),
        "read": (GROUP_MEMBER, "View a group and its members"),
        "update": (GROUP_OWNER, "Rename a group or change its picture"),
        "delete": (GROUP_OWNER_OR_ADMIN, "Delete a group"),
        "manage_members": (GROUP_OWNER, "Add or remove group members"),
        "list_all": (ADMIN, "List every group"),
    },
    "laags": {
        "create": (GROUP_MEMBER, "Plan or log a laag in a group"),
        "read": (LAAG_VIEWER, "View a laag"),
        "update": (LAAG_ORGANIZER, "Edit a laag"),
        "cancel": (LAAG_ORGANIZER, "Cancel a planned laag"),
        "complete": (LAAG_ORGANIZER, "Complete a planned laag"),
        "delete": (LAAG_ORGANIZER_OR_ADMIN, "Delete a laag"),
        "upload_images": (LAAG_ORGANIZER, "Upload laag photos"),
        "list_all": (ADMIN, "List every laag"),
    },
    "comments": {
        "create": (LAAG_VIEWER, "Comment on a laag"),
        "update": (COMMENT_AUTHOR, "Edit own comment"),
        "delete": (COMMENT_AUTHOR, "Delete own comment"),
    },
    "notifications": {
        "read": (NOTIFICATION_RECIPIENT, "Mark a notification as read"),
        "history": (ADMIN, "View notification history across groups"),
    },
    "analytics": {
        "leaderboard": (ANY, "View the attendance leaderboard"),
        "group": (GROUP_MEMBER, "View group analytics"),
        "dashboard": (ADMIN, "View the admin dashboard"),
    },
}

# Rules that only depend on the caller's profile, not on a target resource
GLOBAL_RULES = {ANY, ADMIN}


def get_permission_matrix():
    """
    Returns every permission with its rule
    Format: {
        "permissions": [
            {"name": "laags:update", "resource": "laags", "action": "update",
             "rule": "laag_organizer", "description": "..."},
            ...
        ]
    }
    """
    permissions = []
    for resource, actions in MODULES.items():
        for action, (rule, description) in actions.items():
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "rule": rule,
                "description": description
            })
    return {"permissions": permissions}


def get_rule(permission_name: str) -> str:
    """Rule for a permission name; unknown names raise KeyError."""
    resource, _, action = permission_name.partition(":")
    return MODULES[resource][action][0]


def global_permissions_for_role(role: str):
    """Permissions a profile holds regardless of target resource (used for UI gating)."""
    allowed = {ANY, ADMIN} if role == "admin" else {ANY}
    return [p["name"] for p in PERMISSION_MATRIX["permissions"] if p["rule"] in allowed]


PERMISSION_MATRIX = get_permission_matrix()
