"""Small presentation helpers shared by the service modules."""

FOLLOWING = "Following"
REQUESTED = "Requested"
FOLLOW_BACK = "Follow Back"
FOLLOW = "Follow"

JOINED = "Joined"
JOIN = "Join"


def manage_high_value(value):
    """Compact display form of a count: 999, 1.2k, 3.4M."""
    if value < 1000:
        return str(value)
    if value < 1000000:
        return f"{value / 1000:.1f}k"
    return f"{value / 1000000:.1f}M"


def iso(value):
    return value.isoformat() if value else None


def user_card(user):
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "imgUrl": user.img_url}


def follow_status(is_following, is_requested, follows_back):
    """Label of the follow button a viewer sees on another user."""
    if is_following:
        return FOLLOWING
    if is_requested:
        return REQUESTED
    if follows_back:
        return FOLLOW_BACK
    return FOLLOW


def membership_status(is_member, is_requested):
    if is_member:
        return JOINED
    if is_requested:
        return REQUESTED
    return JOIN
