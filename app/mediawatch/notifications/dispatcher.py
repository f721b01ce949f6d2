"""Notification dispatcher.

Fans one event out to every eligible agent:

1. Build the immutable payload and resolve its severity
2. Ask quiet hours whether anything may be sent right now
3. Keep the agents whose routing column is enabled and whose own
   ``should_send`` accepts the settings
4. Run ``agent.send`` for all candidates concurrently and collect one
   SendResult per candidate

Suppression (quiet hours, routing) produces no attempt and no result.
Failures stay local to the agent that produced them.

Usage Example:
    from mediawatch.notifications import NotificationDispatcher, default_routing_table

    dispatcher = NotificationDispatcher()
    results = dispatcher.notify_server_down("Main Plex", settings, default_routing_table())

    failed = [r for r in results if not r.success]
"""

import contextvars
from concurrent import futures
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from mediawatch.configuration import Settings, get_settings
from mediawatch.logging import bind_dispatch_context, get_module_logger
from mediawatch.notifications import payloads
from mediawatch.notifications.agents import NotificationAgent, create_all_agents
from mediawatch.notifications.models import (
    ActiveSession,
    NotificationContext,
    NotificationEventType,
    NotificationPayload,
    NotificationSettings,
    RoutingTable,
    SendResult,
    TestResult,
    Violation,
)
from mediawatch.notifications.quiet_hours import should_send

logger = get_module_logger()

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class NotificationDispatcher:
    """Concurrent multi-agent notification dispatcher.

    Holds the agent registry and a thread pool shared by all dispatch
    calls. Settings and routing are passed in per call and only read.

    Attributes:
        max_workers: Thread pool size
        dispatch_timeout: Seconds to wait for a fan-out before the
            unfinished agents are reported as timed out
    """

    def __init__(
        self,
        agents: Optional[List[NotificationAgent]] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize the dispatcher.

        Args:
            agents: Agents in registry order. Defaults to create_all_agents().
            settings: Application settings. Defaults to get_settings().
            clock: Returns the current instant; used for payload timestamps
                and quiet hours.
        """
        app_settings = settings or get_settings()
        self.max_workers = app_settings.notifications.MAX_WORKERS
        self.dispatch_timeout = app_settings.notifications.DISPATCH_TIMEOUT_SECONDS
        self._clock = clock or _utc_now
        self._agents: Dict[str, NotificationAgent] = {}
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="notification-agent",
        )

        for agent in agents if agents is not None else create_all_agents(app_settings):
            self.register_agent(agent)

        logger.info(
            "initialized_notification_dispatcher",
            agents=list(self._agents),
            max_workers=self.max_workers,
        )

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register_agent(self, agent: NotificationAgent) -> None:
        """Add an agent to the registry; a name already registered is ignored."""
        if agent.name in self._agents:
            logger.warning("notification_agent_already_registered", agent=agent.name)
            return
        self._agents[agent.name] = agent
        logger.debug("registered_notification_agent", agent=agent.name)

    def get_agents(self) -> List[NotificationAgent]:
        return list(self._agents.values())

    def get_agent(self, name: str) -> Optional[NotificationAgent]:
        return self._agents.get(name)

    def test_agent(self, name: str, settings: NotificationSettings) -> TestResult:
        """Send a connectivity test through one agent.

        Returns:
            The agent's TestResult, or a failed result for unknown names
        """
        agent = self._agents.get(name)
        if agent is None:
            return TestResult.failed(f"Agent '{name}' not found")
        return agent.send_test(settings)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        event_type: NotificationEventType,
        context: NotificationContext,
        settings: NotificationSettings,
        routing: RoutingTable,
    ) -> List[SendResult]:
        """Dispatch one event to every eligible agent.

        Args:
            event_type: Event being dispatched
            context: Context variant for ``event_type``
            settings: Notification settings snapshot
            routing: Per-event channel enablement

        Returns:
            One SendResult per attempted agent, in registry order. Empty
            when quiet hours or routing suppress every channel. Routing
            follows ``event_type``; a context recorded for another event
            fails each attempted agent instead of the whole call.
        """
        if context.type != event_type:
            logger.warning(
                "context_event_mismatch",
                event_type=event_type.value,
                context_type=NotificationEventType(context.type).value,
            )
        payload = payloads.build_payload(
            context, timestamp=self._clock(), event_type=event_type
        )
        return self.dispatch_payload(payload, settings, routing)

    def dispatch_payload(
        self,
        payload: NotificationPayload,
        settings: NotificationSettings,
        routing: RoutingTable,
    ) -> List[SendResult]:
        """Dispatch an already built payload; see ``dispatch``."""
        with bind_dispatch_context(event_type=payload.event_type.value):
            if not should_send(settings.quiet_hours, payload.severity, self._clock()):
                logger.info(
                    "quiet_hours_suppressed",
                    severity=payload.severity.value,
                )
                return []

            candidates = self._candidates(payload.event_type, settings, routing)
            if not candidates:
                logger.info("no_eligible_agents")
                return []

            results = self._send_concurrently(candidates, payload, settings)

            logger.info(
                "notification_dispatched",
                severity=payload.severity.value,
                attempted=len(results),
                succeeded=sum(1 for r in results if r.success),
            )
            return results

    def _candidates(
        self,
        event_type: NotificationEventType,
        settings: NotificationSettings,
        routing: RoutingTable,
    ) -> List[NotificationAgent]:
        row = routing.get(event_type)
        if row is None:
            logger.warning("routing_entry_missing")
            return []

        candidates = []
        for agent in self._agents.values():
            if not row.is_enabled(agent.routing_channel):
                continue
            try:
                eligible = agent.should_send(event_type, settings)
            except Exception as e:
                logger.error(
                    "agent_eligibility_check_failed",
                    agent=agent.name,
                    error=str(e),
                    exc_info=True,
                )
                continue
            if eligible:
                candidates.append(agent)
        return candidates

    def _send_concurrently(
        self,
        candidates: List[NotificationAgent],
        payload: NotificationPayload,
        settings: NotificationSettings,
    ) -> List[SendResult]:
        pending: List[Future] = [
            self._executor.submit(
                contextvars.copy_context().run, agent.send, payload, settings
            )
            for agent in candidates
        ]

        _, not_done = futures.wait(pending, timeout=self.dispatch_timeout)

        results = []
        for agent, future in zip(candidates, pending):
            if future in not_done:
                future.cancel()
                logger.error(
                    "agent_send_timed_out",
                    agent=agent.name,
                    timeout_seconds=self.dispatch_timeout,
                )
                results.append(
                    SendResult.failed(
                        agent.name, f"timed out after {self.dispatch_timeout:g}s"
                    )
                )
                continue

            try:
                results.append(future.result())
            except Exception as e:
                logger.error(
                    "agent_send_raised",
                    agent=agent.name,
                    error=str(e),
                    exc_info=True,
                )
                results.append(SendResult.failed(agent.name, str(e) or type(e).__name__))
        return results

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool; further dispatches are not possible."""
        self._executor.shutdown(wait=wait)
        logger.debug("notification_dispatcher_shut_down", wait=wait)

    # ------------------------------------------------------------------
    # Per-event helpers
    # ------------------------------------------------------------------

    def notify_violation(
        self, violation: Violation, settings: NotificationSettings, routing: RoutingTable
    ) -> List[SendResult]:
        return self.dispatch_payload(
            self._stamp(payloads.from_violation(violation)), settings, routing
        )

    def notify_session_started(
        self, session: ActiveSession, settings: NotificationSettings, routing: RoutingTable
    ) -> List[SendResult]:
        return self.dispatch_payload(
            self._stamp(payloads.from_session_started(session)), settings, routing
        )

    def notify_session_stopped(
        self, session: ActiveSession, settings: NotificationSettings, routing: RoutingTable
    ) -> List[SendResult]:
        return self.dispatch_payload(
            self._stamp(payloads.from_session_stopped(session)), settings, routing
        )

    def notify_server_down(
        self,
        server_name: str,
        settings: NotificationSettings,
        routing: RoutingTable,
        server_type: Optional[str] = None,
    ) -> List[SendResult]:
        return self.dispatch_payload(
            self._stamp(payloads.from_server_down(server_name, server_type)),
            settings,
            routing,
        )

    def notify_server_up(
        self,
        server_name: str,
        settings: NotificationSettings,
        routing: RoutingTable,
        server_type: Optional[str] = None,
    ) -> List[SendResult]:
        return self.dispatch_payload(
            self._stamp(payloads.from_server_up(server_name, server_type)),
            settings,
            routing,
        )

    def notify_new_device(
        self,
        user_name: str,
        device_name: str,
        settings: NotificationSettings,
        routing: RoutingTable,
        platform: Optional[str] = None,
        location: Optional[str] = None,
    ) -> List[SendResult]:
        return self.dispatch_payload(
            self._stamp(
                payloads.from_new_device(user_name, device_name, platform, location)
            ),
            settings,
            routing,
        )

    def notify_trust_score_changed(
        self,
        user_name: str,
        previous_score: int,
        new_score: int,
        settings: NotificationSettings,
        routing: RoutingTable,
        reason: Optional[str] = None,
    ) -> List[SendResult]:
        return self.dispatch_payload(
            self._stamp(
                payloads.from_trust_score_changed(
                    user_name, previous_score, new_score, reason
                )
            ),
            settings,
            routing,
        )

    def _stamp(self, payload: NotificationPayload) -> NotificationPayload:
        return payload.model_copy(update={"timestamp": self._clock()})
