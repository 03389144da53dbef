import logging
import signal

from alarms.command_router import HELP_TEXT, CommandRouter
from alarms.gateway import LocalNotificationGateway, NotificationRequest
from alarms.notification_center import LocalNotificationCenter
from alarms.sounds import AlarmSoundPlayer, LocalSpeaker
from alarms.store import AlarmChange, AlarmStore
from config import Config, load_config, setup_logging
from time_utils import now_in_tz, resolve_timezone

logger = logging.getLogger("alarm_app")


def graceful_exit(signum, frame) -> None:  # pragma: no cover - signal handler
    logger.info("Shutting down (signal %s)", signum)
    raise KeyboardInterrupt()


class AlarmRuntime:
    def __init__(self, config: Config):
        self.config = config
        self.tzinfo = resolve_timezone(config.timezone_name)

        self.sound_player = AlarmSoundPlayer(config.alarm_sound_path)
        self.speaker = LocalSpeaker(enabled=config.enable_speech)
        self.center = LocalNotificationCenter(
            on_deliver=self._on_notification,
            check_interval=config.alarm_check_interval_ms / 1000.0,
            timezone=self.tzinfo,
            clock=lambda: now_in_tz(self.tzinfo),
        )
        self.gateway = LocalNotificationGateway(
            self.center,
            title=config.notification_title,
            default_body=config.notification_default_body,
            repeat_policy=config.repeat_policy,
        )
        self.store = AlarmStore(self.gateway, storage_path=config.storage_path)
        self.router = CommandRouter(self.store, sound_player=self.sound_player)
        self.store.subscribe(self._on_change)

    def start(self) -> None:
        self.center.request_authorization(self.config.notifications_enabled)
        self.store.restore()
        self.center.start()

    def shutdown(self) -> None:
        self.center.shutdown()
        self.sound_player.stop_loop()

    def run_console(self) -> None:
        print(HELP_TEXT)
        while True:
            try:
                line = input("alarm> ")
            except EOFError:
                break
            result = self.router.handle_text(line)
            if result is None:
                continue
            if result.response_text:
                print(result.response_text)
            if result.quit:
                break

    def _on_change(self, change: AlarmChange) -> None:
        logger.debug("Alarm list changed (%s), %s alarms", change.kind, len(self.store.list()))

    def _on_notification(self, request: NotificationRequest) -> None:
        print(f"\n*** {request.title}: {request.body} ***  (type 'stop' to silence)")
        self.sound_player.start_loop()
        self.speaker.announce_async(request)


def main() -> None:
    config = load_config()
    setup_logging(config.log_level, config.log_dir)
    signal.signal(signal.SIGINT, graceful_exit)
    logger.info("Starting alarm clock (repeat_policy=%s)", config.repeat_policy.value)
    if config.storage_path:
        logger.info("Alarm storage enabled (path=%s)", config.storage_path)
    else:
        logger.info("Alarms are kept in memory only")

    runtime = AlarmRuntime(config)
    runtime.start()
    try:
        runtime.run_console()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        runtime.shutdown()


if __name__ == "__main__":
    main()
