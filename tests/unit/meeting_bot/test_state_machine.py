"""
Unit tests for the lifecycle state machine.
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from services.meeting_bot.state_machine import machine as machine_module
from services.meeting_bot.state_machine import MeetingStateMachine, MeetingStateType, StateTransition
from services.meeting_bot.state_machine.machine import STATE_HANDLERS
from services.meeting_bot.state_machine.states import BaseState, CleanupState
from services.meeting_bot.exceptions import MeetingJoinError
from shared.schemas import MeetingEndReason


def scripted_state(state_type, result=None, error=None, calls=None):
    """Build a state class that returns a fixed transition or raises."""

    class ScriptedState(BaseState):
        async def execute(self):
            if calls is not None:
                calls.append(state_type)
            if error is not None:
                raise error
            return result

    ScriptedState.state_type = state_type
    return ScriptedState


class TestStateHandlers:
    """Test the dispatch table."""

    def test_every_non_terminal_state_has_a_handler(self):
        """Test each state except the terminal one is dispatchable."""
        expected = set(MeetingStateType) - {MeetingStateType.TERMINATED}
        assert set(STATE_HANDLERS) == expected

    def test_handlers_match_their_state(self):
        for state_type, handler in STATE_HANDLERS.items():
            assert handler.state_type == state_type


class TestMeetingStateMachine:
    """Test running sessions end to end."""

    @pytest.mark.asyncio
    async def test_happy_path_until_meeting_ends(self, meeting_context, provider, mock_transcoder):
        """Test a full session through every phase to termination."""
        meeting_context.transcoder = mock_transcoder
        provider.has_meeting_ended.side_effect = [False, True]

        outcome = await MeetingStateMachine(meeting_context).run()

        assert outcome.final_state == MeetingStateType.TERMINATED
        assert outcome.end_reason == MeetingEndReason.MEETING_ENDED
        assert outcome.succeeded is True
        assert [state for state, _ in outcome.history] == [
            "initialization", "joining", "waiting_room", "in_call", "cleanup", "terminated",
        ]
        mock_transcoder.start.assert_awaited_once()
        mock_transcoder.stop.assert_awaited_once()
        mock_transcoder.upload_to_s3.assert_awaited_once()
        assert provider.audio_context.stopped is True
        assert meeting_context.meeting_timeout_handle is None

    @pytest.mark.asyncio
    async def test_state_error_routes_to_cleanup(self, meeting_context, provider):
        """Test a failing state records its end reason and still terminates."""
        provider.join_meeting.side_effect = MeetingJoinError("Join button missing")

        outcome = await MeetingStateMachine(meeting_context).run()

        assert outcome.final_state == MeetingStateType.TERMINATED
        assert outcome.end_reason == MeetingEndReason.CANNOT_JOIN_MEETING
        assert isinstance(outcome.error, MeetingJoinError)
        assert outcome.succeeded is False
        assert [state for state, _ in outcome.history][-2:] == ["cleanup", "terminated"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self, meeting_context, provider):
        """Test an error without its own end reason maps to an internal error."""
        provider.open_meeting_page.side_effect = KeyError("page")

        outcome = await MeetingStateMachine(meeting_context).run()

        assert outcome.end_reason == MeetingEndReason.INTERNAL_ERROR
        assert outcome.final_state == MeetingStateType.TERMINATED

    @pytest.mark.asyncio
    async def test_cleanup_failure_reenters_cleanup(self, meeting_context):
        """Test cleanup is attempted again when it raises."""
        calls = []
        attempts = iter([RuntimeError("first attempt"), None])

        class FlakyCleanup(CleanupState):
            async def execute(self):
                calls.append(MeetingStateType.CLEANUP)
                error = next(attempts)
                if error is not None:
                    raise error
                return self.transition(MeetingStateType.TERMINATED)

        handlers = dict(STATE_HANDLERS)
        handlers[MeetingStateType.CLEANUP] = FlakyCleanup

        outcome = await MeetingStateMachine(
            meeting_context, initial_state=MeetingStateType.CLEANUP, handlers=handlers
        ).run()

        assert calls == [MeetingStateType.CLEANUP, MeetingStateType.CLEANUP]
        assert outcome.final_state == MeetingStateType.TERMINATED

    @pytest.mark.asyncio
    async def test_delay_is_honoured(self, meeting_context):
        """Test the machine sleeps for the delay a state asks for."""
        handlers = {
            MeetingStateType.IN_CALL: scripted_state(
                MeetingStateType.IN_CALL, StateTransition(MeetingStateType.CLEANUP, delay=2.5)
            ),
            MeetingStateType.CLEANUP: scripted_state(
                MeetingStateType.CLEANUP, StateTransition(MeetingStateType.TERMINATED)
            ),
        }

        with patch.object(machine_module.asyncio, "sleep", AsyncMock()) as sleep:
            await MeetingStateMachine(
                meeting_context, initial_state=MeetingStateType.IN_CALL, handlers=handlers
            ).run()

        sleep.assert_awaited_once_with(2.5)

    @pytest.mark.asyncio
    async def test_self_transition_is_recorded_once(self, meeting_context):
        """Test polling a state does not grow the history."""
        results = iter([
            StateTransition(MeetingStateType.IN_CALL, delay=0),
            StateTransition(MeetingStateType.IN_CALL, delay=0),
            StateTransition(MeetingStateType.CLEANUP),
        ])

        class PollingState(BaseState):
            state_type = MeetingStateType.IN_CALL

            async def execute(self):
                return next(results)

        handlers = {
            MeetingStateType.IN_CALL: PollingState,
            MeetingStateType.CLEANUP: scripted_state(
                MeetingStateType.CLEANUP, StateTransition(MeetingStateType.TERMINATED)
            ),
        }

        outcome = await MeetingStateMachine(
            meeting_context, initial_state=MeetingStateType.IN_CALL, handlers=handlers
        ).run()

        assert [state for state, _ in outcome.history] == ["in_call", "cleanup", "terminated"]

    @pytest.mark.asyncio
    async def test_reports_state_changes(self, meeting_context):
        """Test each state change is reported with the end reason once known."""
        meeting_context.status_reporter = Mock(report=AsyncMock(return_value=True))
        handlers = {
            MeetingStateType.IN_CALL: scripted_state(
                MeetingStateType.IN_CALL, error=MeetingJoinError("kicked")
            ),
            MeetingStateType.CLEANUP: scripted_state(
                MeetingStateType.CLEANUP, StateTransition(MeetingStateType.TERMINATED)
            ),
        }

        await MeetingStateMachine(
            meeting_context, initial_state=MeetingStateType.IN_CALL, handlers=handlers
        ).run()

        reports = [c.args for c in meeting_context.status_reporter.report.await_args_list]
        assert reports == [
            ("state_changed", {"from": "in_call", "to": "cleanup", "end_reason": "cannot_join_meeting"}),
            ("state_changed", {"from": "cleanup", "to": "terminated", "end_reason": "cannot_join_meeting"}),
        ]

    @pytest.mark.asyncio
    async def test_request_stop_leaves_the_call(self, meeting_context, provider):
        """Test an external stop request ends the session with the API reason."""
        machine = MeetingStateMachine(meeting_context)
        provider.join_meeting.side_effect = lambda context: machine.request_stop()

        outcome = await machine.run()

        assert outcome.end_reason == MeetingEndReason.API_REQUEST
        assert outcome.succeeded is True
