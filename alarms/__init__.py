"""Alarm clock core: records, store and local notification scheduling."""

from .gateway import LocalNotificationGateway, NotificationGateway, NotificationRequest, RepeatPolicy
from .models import AlarmRecord
from .notification_center import LocalNotificationCenter
from .store import AlarmChange, AlarmStore
