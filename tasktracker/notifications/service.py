"""Notification service — admin badge counts."""

from __future__ import annotations

import logging

from tasktracker.client.api import ApiClient
from tasktracker.comments.service import CommentService
from tasktracker.leave.service import LeaveService
from tasktracker.notifications.schemas import NotificationCounts

logger = logging.getLogger(__name__)


class NotificationService:
    """Badge counts, refreshed by a five-minute poller."""

    @staticmethod
    async def fetch_counts(client: ApiClient) -> NotificationCounts:
        """New leave requests (dedicated endpoint) and comments with new activity."""
        leave_count = await LeaveService.new_requests_count(client)
        comments = await CommentService.get_all_comments(client)
        counts = NotificationCounts(
            new_leave_requests=leave_count,
            new_comments=CommentService.count_new(comments),
        )
        logger.debug(
            "Notification counts: leaves=%d comments=%d",
            counts.new_leave_requests,
            counts.new_comments,
        )
        return counts
