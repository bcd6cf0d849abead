from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from core.responses import standardize_response

from .services import NotificationServices


def serialize_notification(notification) -> dict:
    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "link": notification.link,
        "is_read": notification.is_read,
        "created_at": notification.created_at,
    }


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def get_notifications(request):
    """
    Latest notifications of the current user
    GET /api/notifications?unread_only=true
    """
    unread_only = request.GET.get("unread_only", "").lower() == "true"
    result = NotificationServices.get_user_notifications(request.user.id, unread_only)
    return standardize_response(
        True,
        "Notifications retrieved successfully",
        {
            "notifications": [serialize_notification(n) for n in result["notifications"]],
            "unread_count": result["unread_count"],
        },
    )


@api_view(["PUT"])
@permission_classes([IsAuthenticated])
def mark_as_read(request, notification_id):
    notification = NotificationServices.mark_as_read(notification_id, request.user.id)
    return standardize_response(
        True,
        "Notification marked as read",
        {"notification": serialize_notification(notification)},
    )


@api_view(["PUT"])
@permission_classes([IsAuthenticated])
def mark_all_as_read(request):
    updated = NotificationServices.mark_all_as_read(request.user.id)
    return standardize_response(
        True, "All notifications marked as read", {"updated": updated}
    )


@api_view(["DELETE"])
@permission_classes([IsAuthenticated])
def delete_notification(request, notification_id):
    NotificationServices.delete_notification(notification_id, request.user.id)
    return standardize_response(True, "Notification deleted")
